"""Adapter for the regulator's aggregated short-position CSV files."""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Final

import httpx

from stock_tracker.domain import UnexpectedFileError, domain_build_job_event

from .errors import ShortSourceConnectionError, ShortSourceTimeoutError, ShortSourceUnavailableError
from .interfaces import ShortPositionFetchResult, ShortPositionSourcePort

logger = logging.getLogger(__name__)


class ShortPositionSourceAdapter(ShortPositionSourcePort):
    """Download one daily aggregated short-position file and parse its rows.

    The source answers a missing file with an HTML page, so an HTML content type
    means "nothing published for this date" rather than a failure.
    """

    _USER_AGENT: Final[str] = "stock-tracker/0.1 (Python/httpx)"
    _CSV_CONTENT_TYPES: Final[tuple[str, ...]] = ("text/plain", "text/csv", "application/csv")
    _HEADER_FIELDS: Final[dict[str, str]] = {
        "Stock Code": "ticker_no",
        "Date": "reporting_date",
        "Aggregated Reportable Short Positions (Shares)": "shorted_shares",
        "Aggregated Reportable Short Positions (HK$)": "shorted_amount",
    }
    _SOURCE_DATE_FORMAT: Final[str] = "%d/%m/%Y"

    def __init__(
        self,
        base_url: str = "https://www.sfc.hk/-/media/EN/pdf/spr",
        request_timeout_seconds: float = 30.0,
    ):
        """Initialize short-position source adapter.

        Args:
            base_url: Root URL of the published files.
            request_timeout_seconds: HTTP request timeout in seconds.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._base_url = normalized_base_url.rstrip("/")
        self._request_timeout_seconds = request_timeout_seconds
        self._http_client: httpx.Client | None = None

    def adapter_source_name(self) -> str:
        return "short_position_aggregated_csv"

    def adapter_build_url(self, reporting_date: date) -> str:
        """Build the file URL for one date.

        Args:
            reporting_date: Date of the requested file.

        Returns:
            str: `{base}/{YYYY}/{MM}/{DD}/Short_Position_Reporting_Aggregated_Data_{YYYYMMDD}.csv`.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        file_name = f"Short_Position_Reporting_Aggregated_Data_{reporting_date:%Y%m%d}.csv"
        return f"{self._base_url}/{reporting_date:%Y}/{reporting_date:%m}/{reporting_date:%d}/{file_name}"

    def adapter_fetch_short_positions(self, reporting_date: date) -> ShortPositionFetchResult:
        """Fetch and parse the file published for one date.

        Args:
            reporting_date: Date of the requested file.

        Returns:
            ShortPositionFetchResult: Parsed rows and fetch metadata.

        Raises:
            ShortSourceUnavailableError: Raised when no file exists for the date.
            UnexpectedFileError: Raised when the response is not the expected CSV.
            ShortSourceConnectionError: Raised for transport and HTTP status failures.
            ShortSourceTimeoutError: Raised when the request times out.
        """

        if reporting_date is None:
            raise ValueError("reporting_date must not be None")

        stage_timeline: list[dict[str, Any]] = []
        source_url = self.adapter_build_url(reporting_date)

        stage_timeline.append(domain_build_job_event(stage="download", status="started", details={"url": source_url}))
        response = self._adapter_http_get(source_url)
        self._adapter_check_content_type(response, source_url)
        stage_timeline.append(domain_build_job_event(stage="download", status="completed"))

        rows = self.adapter_parse_csv(response.content, source_url)
        stage_timeline.append(domain_build_job_event(stage="parse", status="completed", details={"row_count": len(rows)}))
        logger.info("parsed %d short rows from %s", len(rows), source_url)

        return ShortPositionFetchResult(
            reporting_date=reporting_date,
            source_url=source_url,
            rows=rows,
            stage_timeline=stage_timeline,
        )

    def adapter_parse_csv(self, payload: bytes, source_url: str = "") -> list[dict[str, Any]]:
        """Parse CSV bytes into rows keyed by storage field names.

        Args:
            payload: Raw CSV bytes, optionally prefixed by a UTF-8 BOM.
            source_url: URL used in error messages.

        Returns:
            list[dict[str, Any]]: Parsed rows with zero-padded tickers.

        Raises:
            UnexpectedFileError: Raised when columns are missing or values do not parse.
        """

        try:
            text_payload = payload.decode("utf-8-sig")
        except UnicodeDecodeError as error:
            raise UnexpectedFileError("short position file is not valid UTF-8", {"url": source_url}) from error

        reader = csv.DictReader(io.StringIO(text_payload))
        try:
            header_names = [name.strip() for name in (reader.fieldnames or [])]
            missing_headers = [name for name in self._HEADER_FIELDS if name not in header_names]
            if missing_headers:
                raise UnexpectedFileError(
                    "short position file is missing expected columns",
                    {"url": source_url, "missing_columns": missing_headers},
                )
            reader.fieldnames = header_names

            rows: list[dict[str, Any]] = []
            for line_number, source_row in enumerate(reader, start=2):
                if not any((value or "").strip() for value in source_row.values() if isinstance(value, str)):
                    continue
                rows.append(self._adapter_parse_row(source_row, line_number, source_url))
        except csv.Error as error:
            raise UnexpectedFileError(
                "short position file is not valid CSV",
                {"url": source_url, "line": reader.line_num},
            ) from error
        return rows

    def adapter_close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _adapter_parse_row(self, source_row: dict[str, Any], line_number: int, source_url: str) -> dict[str, Any]:
        mapped = {field: (source_row.get(header) or "").strip() for header, field in self._HEADER_FIELDS.items()}
        try:
            return {
                "ticker_no": mapped["ticker_no"].zfill(5),
                "reporting_date": datetime.strptime(mapped["reporting_date"], self._SOURCE_DATE_FORMAT).date(),
                "shorted_shares": self._adapter_parse_integer(mapped["shorted_shares"]),
                "shorted_amount": self._adapter_parse_integer(mapped["shorted_amount"]),
            }
        except (ValueError, ArithmeticError) as error:
            raise UnexpectedFileError(
                "short position file has an unparseable row",
                {"url": source_url, "line": line_number},
            ) from error

    def _adapter_parse_integer(self, value: str) -> int:
        return int(Decimal(value.replace(",", "")))

    def _adapter_check_content_type(self, response: httpx.Response, source_url: str) -> None:
        content_type = (response.headers.get("content-type") or "").lower()
        if not content_type:
            return
        if "text/html" in content_type:
            raise ShortSourceUnavailableError("No file exists for this date.", source_url=source_url)
        if not any(expected in content_type for expected in self._CSV_CONTENT_TYPES):
            raise UnexpectedFileError(
                "Unexpected content type when retrieving short position file",
                {"url": source_url, "content_type": content_type},
            )

    def _adapter_http_get(self, url: str) -> httpx.Response:
        """Execute one HTTP GET through the pooled client.

        Args:
            url: File URL.

        Returns:
            httpx.Response: Successful response.

        Raises:
            ShortSourceUnavailableError: Raised on HTTP 404.
            ShortSourceConnectionError: Raised on transport errors and other HTTP failures.
            ShortSourceTimeoutError: Raised when the request times out.
        """

        try:
            response = self._adapter_client().get(url)
            response.raise_for_status()
        except httpx.TimeoutException as error:
            raise ShortSourceTimeoutError(f"short position request timed out: {error}", source_url=url) from error
        except httpx.HTTPStatusError as error:
            if error.response.status_code == 404:
                raise ShortSourceUnavailableError("No file exists for this date.", source_url=url) from error
            raise ShortSourceConnectionError(
                f"short position request failed: status={error.response.status_code}",
                source_url=url,
            ) from error
        except httpx.HTTPError as error:
            raise ShortSourceConnectionError(f"short position request failed: {error}", source_url=url) from error
        return response

    def _adapter_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=self._request_timeout_seconds,
                headers={"User-Agent": self._USER_AGENT},
                follow_redirects=True,
            )
        return self._http_client
