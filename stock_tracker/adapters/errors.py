"""Project-native typed exceptions for short-position source failures."""

from __future__ import annotations


class ShortSourceError(Exception):
    """Base exception for adapter-level short-position source failures.

    Attributes:
        source_url: Optional URL of the file being retrieved.
    """

    def __init__(self, message: str, source_url: str | None = None):
        super().__init__(message)
        self.source_url = source_url


class ShortSourceConnectionError(ShortSourceError, ConnectionError):
    """Transport-level failure or unexpected HTTP status from the source."""


class ShortSourceTimeoutError(ShortSourceError, TimeoutError):
    """Transport timeout while downloading a source file."""


class ShortSourceUnavailableError(ShortSourceError, LookupError):
    """No file is published for the requested date."""
