"""Keyset pagination for contract data."""

from .cursor import (
    CursorData,
    CursorPosition,
    encode_cursor,
    decode_cursor
)
from .params import (
    RequestParams,
    parse_request_params
)
from .query_builder import (
    PageQuery,
    ContractDataQueryBuilder,
    build_contract_data_query
)
from .links import (
    build_pagination_link_href,
    build_pagination_links,
    storage_base_url
)

__all__ = [
    "CursorData",
    "CursorPosition",
    "encode_cursor",
    "decode_cursor",
    "RequestParams",
    "parse_request_params",
    "PageQuery",
    "ContractDataQueryBuilder",
    "build_contract_data_query",
    "build_pagination_link_href",
    "build_pagination_links",
    "storage_base_url"
]
