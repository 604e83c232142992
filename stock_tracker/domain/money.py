"""Exact fixed-point money value type backed by integer minor units."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

_MONEY_MAPPING_KEYS = ("whole", "fractional", "decimal_places", "iso_code")


@dataclass(frozen=True)
class Money:
    """Currency amount split into whole and fractional minor-unit parts.

    The amount in minor units always equals
    `whole * 10**decimal_places + fractional` with `0 <= fractional < 10**decimal_places`.
    Negative amounts carry their sign on `whole` (floor decomposition), so
    `-0.45` with two decimal places is stored as `whole=-1, fractional=55`.

    Attributes:
        whole: Whole currency units, signed.
        fractional: Fractional minor units in `[0, 10**decimal_places)`.
        decimal_places: Number of minor-unit digits for the currency.
        iso_code: Three-letter ISO 4217 currency code.
    """

    whole: int
    fractional: int
    decimal_places: int
    iso_code: str

    def __post_init__(self) -> None:
        if isinstance(self.decimal_places, bool) or not isinstance(self.decimal_places, int):
            raise TypeError("decimal_places must be an int")
        if self.decimal_places < 0:
            raise ValueError("decimal_places must be >= 0")
        if isinstance(self.whole, bool) or not isinstance(self.whole, int):
            raise TypeError("whole must be an int")
        if isinstance(self.fractional, bool) or not isinstance(self.fractional, int):
            raise TypeError("fractional must be an int")
        if not 0 <= self.fractional < 10**self.decimal_places:
            raise ValueError("fractional must be within [0, 10**decimal_places)")
        if not isinstance(self.iso_code, str) or len(self.iso_code) != 3:
            raise ValueError("iso_code must be a 3-letter string")

    @classmethod
    def money_from_minor_units(cls, value: int, decimal_places: int, iso_code: str) -> Money:
        """Build money exactly from an integer minor-unit amount.

        Args:
            value: Amount in minor units (for example cents).
            decimal_places: Number of minor-unit digits.
            iso_code: Three-letter currency code.

        Returns:
            Money: Exact decomposed value.

        Raises:
            TypeError: Raised when value is not an int.
            ValueError: Raised when decimal places or currency code are invalid.
        """

        if value is None:
            raise TypeError("value must not be None")
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("value must be an int minor-unit amount")
        if isinstance(decimal_places, bool) or not isinstance(decimal_places, int) or decimal_places < 0:
            raise ValueError("decimal_places must be a non-negative int")

        whole, fractional = divmod(value, 10**decimal_places)
        return cls(whole=whole, fractional=fractional, decimal_places=decimal_places, iso_code=iso_code)

    @classmethod
    def money_from_float(cls, value: float, decimal_places: int, iso_code: str) -> Money:
        """Build money from a floating minor-unit amount.

        Rounds to the nearest minor unit; amounts beyond float mantissa precision
        lose digits. Prefer `money_from_minor_units` for ledger amounts.

        Args:
            value: Amount in minor units as float.
            decimal_places: Number of minor-unit digits.
            iso_code: Three-letter currency code.

        Returns:
            Money: Best-effort decomposed value.

        Raises:
            TypeError: Raised when value is not a real number.
            ValueError: Raised when value is not finite.
        """

        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError("value must be a real number")
        if not math.isfinite(value):
            raise ValueError("value must be finite")

        return cls.money_from_minor_units(int(round(value)), decimal_places, iso_code)

    @classmethod
    def money_from_mapping(cls, payload: Mapping[str, Any]) -> Money:
        """Build money from a `{whole, fractional, decimal_places, iso_code}` mapping.

        Args:
            payload: Mapping with the four money keys.

        Returns:
            Money: Parsed money value.

        Raises:
            TypeError: Raised when payload is not a mapping or misses a key.
            ValueError: Raised when component values are out of range.
        """

        if not isinstance(payload, Mapping):
            raise TypeError("money payload must be a mapping")
        missing_keys = [key for key in _MONEY_MAPPING_KEYS if key not in payload]
        if missing_keys:
            raise TypeError(f"money payload is missing keys: {', '.join(missing_keys)}")

        return cls(
            whole=payload["whole"],
            fractional=payload["fractional"],
            decimal_places=payload["decimal_places"],
            iso_code=payload["iso_code"],
        )

    def money_minor_units(self) -> int:
        """Recompose the exact integer minor-unit amount.

        Returns:
            int: `whole * 10**decimal_places + fractional`.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return self.whole * 10**self.decimal_places + self.fractional

    def money_to_decimal(self) -> Decimal:
        """Return the amount as a decimal numeral for display.

        Returns:
            Decimal: Display value; not intended for further arithmetic.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return Decimal(self.money_minor_units()).scaleb(-self.decimal_places)

    def money_to_display(self) -> str:
        return f"{self.money_to_decimal():f} {self.iso_code}"

    def money_to_plain(self) -> dict[str, object]:
        """Serialize money to its JSON-compatible mapping form.

        Returns:
            dict[str, object]: Mapping with the four money keys.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return {
            "whole": self.whole,
            "fractional": self.fractional,
            "decimal_places": self.decimal_places,
            "iso_code": self.iso_code,
        }
