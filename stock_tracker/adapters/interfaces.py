"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol


@dataclass(frozen=True)
class ShortPositionFetchResult:
    """Result contract for one source file retrieval.

    Attributes:
        reporting_date: Date the file was requested for.
        source_url: URL the file was downloaded from.
        rows: Parsed rows with `ticker_no`, `reporting_date`, `shorted_shares`
            and `shorted_amount`.
        stage_timeline: Structured stage timeline entries captured by the adapter.
    """

    reporting_date: date
    source_url: str
    rows: list[dict[str, Any]]
    stage_timeline: list[dict[str, Any]]


class ShortPositionSourcePort(Protocol):
    """Port definition for fetching aggregated short-position files."""

    def adapter_source_name(self) -> str:
        """Return adapter source identifier for diagnostics.

        Returns:
            str: Human-readable upstream source identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    def adapter_fetch_short_positions(self, reporting_date: date) -> ShortPositionFetchResult:
        """Fetch and parse the file published for one date.

        Args:
            reporting_date: Date of the requested file.

        Returns:
            ShortPositionFetchResult: Parsed rows and fetch metadata.

        Raises:
            ShortSourceUnavailableError: Raised when no file exists for the date.
            UnexpectedFileError: Raised when the response is not the expected CSV.
            ConnectionError: Raised when upstream connection fails.
            TimeoutError: Raised when request exceeds timeout.
        """
