"""Domain models, value types and errors used across application layers."""

from .dates import domain_coerce_date, domain_date_to_string, domain_string_to_date
from .errors import (
    ERROR_KIND_HTTP_STATUSES,
    UNKNOWN_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
    DuplicateFoundError,
    ErrorKind,
    InvalidRequestError,
    ProjectionContractError,
    RecordMissingDataError,
    RecordNotFoundError,
    ReferenceCacheEmptyError,
    TrackerError,
    UnexpectedFileError,
)
from .models import (
    CurrencyCode,
    CurrencyRecord,
    HealthStatus,
    QueryType,
    StockCategory,
    StockSubcategory,
    TransactionType,
    domain_enum_values,
)
from .money import Money
from .records import (
    DiaryEntryRecord,
    RecordOperation,
    ShortDataRecord,
    StockRecord,
    StockTransactionRecord,
    domain_record_field_names,
    domain_record_from_mapping,
    domain_record_stamp,
    domain_record_to_plain,
    domain_record_to_storage,
)
from .timeline import domain_build_job_event

__all__ = [
    "CurrencyCode",
    "CurrencyRecord",
    "DiaryEntryRecord",
    "DuplicateFoundError",
    "ERROR_KIND_HTTP_STATUSES",
    "ErrorKind",
    "HealthStatus",
    "InvalidRequestError",
    "Money",
    "ProjectionContractError",
    "QueryType",
    "RecordMissingDataError",
    "RecordNotFoundError",
    "RecordOperation",
    "ReferenceCacheEmptyError",
    "ShortDataRecord",
    "StockCategory",
    "StockRecord",
    "StockSubcategory",
    "StockTransactionRecord",
    "TrackerError",
    "TransactionType",
    "UNKNOWN_ERROR_CODE",
    "UNKNOWN_ERROR_MESSAGE",
    "UnexpectedFileError",
    "domain_build_job_event",
    "domain_coerce_date",
    "domain_date_to_string",
    "domain_enum_values",
    "domain_record_field_names",
    "domain_record_from_mapping",
    "domain_record_stamp",
    "domain_record_to_plain",
    "domain_record_to_storage",
    "domain_string_to_date",
]
