"""Models for the Contract Storage API."""

from .contract_data import (
    SortDirection,
    SortField,
    SortColumn,
    SORT_COLUMNS,
    DEFAULT_SORT_FIELD,
    DEFAULT_SORT_DIRECTION,
    ContractDataRow,
    ContractDataDTO,
    Link,
    PaginationLinks,
    ContractDataPage,
    decode_binary,
    unix_seconds,
    serialize_contract_data_results
)

__all__ = [
    "SortDirection",
    "SortField",
    "SortColumn",
    "SORT_COLUMNS",
    "DEFAULT_SORT_FIELD",
    "DEFAULT_SORT_DIRECTION",
    "ContractDataRow",
    "ContractDataDTO",
    "Link",
    "PaginationLinks",
    "ContractDataPage",
    "decode_binary",
    "unix_seconds",
    "serialize_contract_data_results"
]
