"""Date conversion helpers for `yyyy-MM-dd` request and storage values."""

from __future__ import annotations

from datetime import date, datetime, timezone

from .errors import ProjectionContractError


def domain_string_to_date(value: str | None) -> datetime | None:
    """Convert a `yyyy-MM-dd` string into a UTC-midnight datetime.

    Args:
        value: Candidate date string.

    Returns:
        datetime | None: Timezone-aware UTC datetime, or None when the value is
        None, not a string, or has non-numeric or out-of-range components.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None or not isinstance(value, str):
        return None

    date_parts = value.split("-")
    if len(date_parts) != 3:
        return None

    try:
        year, month, day = (int(part) for part in date_parts)
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def domain_date_to_string(value: date | datetime | None) -> str:
    """Render a date as `yyyy-MM-dd`, or an empty string for None.

    Args:
        value: Date or datetime value.

    Returns:
        str: Formatted date string.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def domain_coerce_date(value: object) -> date | None:
    # Storage rows carry `date`, request payloads carry `yyyy-MM-dd` strings.
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    converted = domain_string_to_date(value) if isinstance(value, str) else None
    if converted is None:
        raise ProjectionContractError(f"{value!r} cannot be cast to a date")
    return converted.date()
