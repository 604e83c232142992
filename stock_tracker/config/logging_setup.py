"""Process-wide logging configuration."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def logging_configure(level: str = "INFO") -> None:
    """Install one stream handler on the root logger.

    Calling again replaces the handler instead of stacking another one.

    Args:
        level: Logging level name.

    Returns:
        None: Root logger is configured as a side effect.

    Raises:
        ValueError: Raised when level is not a known level name.
    """

    resolved_level = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved_level, int):
        raise ValueError(f"unknown log level={level}")

    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, stream=sys.stderr, force=True)
