"""Typed domain models and closed value sets shared across runtime layers."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class CurrencyRecord:
    """Currency metadata row used to interpret stored minor-unit amounts.

    Attributes:
        iso_code: Three-letter ISO 4217 code.
        decimal_places: Number of minor-unit digits.
    """

    iso_code: str
    decimal_places: int


class QueryType(str, Enum):
    """Boolean connective used between predicate fragments."""

    AND = "AND"
    OR = "OR"


class StockCategory(str, Enum):
    EQUITY = "equity"
    ETP = "exchange_traded_products"
    REIT = "reit"


class StockSubcategory(str, Enum):
    DR = "depository_receipts"
    EQUITY_GEM = "equity_securities_gem"
    EQUITY_MAIN = "equity_securities_main"
    ETF = "etf"
    INVESTMENT_COMPANIES = "investment_companies"
    LEVERAGED_AND_INVERSE = "leveraged_and_inverse"
    TRADING_ONLY = "trading_only_securities"
    OTHERS = "others"


class CurrencyCode(str, Enum):
    HKD = "HKD"
    RMB = "RMB"
    USD = "USD"


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"


def domain_enum_values(enum_type: type[Enum]) -> tuple[str, ...]:
    """Return the string values of an enum in declaration order.

    Args:
        enum_type: Enum class with string values.

    Returns:
        tuple[str, ...]: Declared values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return tuple(member.value for member in enum_type)
