"""Adapter layer package for third-party data sources."""

from .errors import (
    ShortSourceConnectionError,
    ShortSourceError,
    ShortSourceTimeoutError,
    ShortSourceUnavailableError,
)
from .interfaces import ShortPositionFetchResult, ShortPositionSourcePort
from .short_position_source import ShortPositionSourceAdapter

__all__ = [
    "ShortPositionFetchResult",
    "ShortPositionSourceAdapter",
    "ShortPositionSourcePort",
    "ShortSourceConnectionError",
    "ShortSourceError",
    "ShortSourceTimeoutError",
    "ShortSourceUnavailableError",
]
