"""Self/next/prev link construction for storage pages."""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from ..models.contract_data import (
    DEFAULT_SORT_FIELD, ContractDataRow, Link, PaginationLinks, SortField, unix_seconds
)
from .cursor import encode_cursor
from .params import RequestParams


def build_pagination_link_href(base_url: str, params: Dict[str, Any]) -> str:
    """Render a link href, skipping parameters without a value."""
    query = urlencode({key: value for key, value in params.items() if value is not None})
    return f"{base_url}?{query}"


def storage_base_url(api_prefix: str, network: str, contract_id: str) -> str:
    return f"{api_prefix.rstrip('/')}/{network}/contract/{contract_id}/storage"


def cursor_sort_value(row: ContractDataRow, sort_field: SortField) -> Any:
    """Sort value of a row as carried in a cursor."""
    if sort_field is SortField.UPDATED_AT:
        return unix_seconds(row.closed_at)
    if sort_field is SortField.TTL:
        return row.live_until_ledger_sequence
    if sort_field is SortField.DURABILITY:
        return row.durability
    return None


def _boundary_cursor(cursor_type: str, row: ContractDataRow, sort_field: SortField) -> str:
    return encode_cursor(
        cursor_type,
        key_hash=row.key_hash,
        sort_field=sort_field,
        sort_value=cursor_sort_value(row, sort_field)
    )


def build_pagination_links(
    request_params: RequestParams,
    results: List[ContractDataRow],
    api_prefix: str = "/api"
) -> PaginationLinks:
    """Build self, next and prev links for a fetched page.

    ``next`` is offered whenever the page is full, so a data set whose size is
    a multiple of the limit ends with one empty page. ``prev`` is offered when
    the page was reached through a cursor and has rows to anchor on.
    """
    sort_field = request_params.sort_field
    query_params: Dict[str, Optional[str]] = {
        "order": request_params.sort_direction.value,
        "limit": str(request_params.limit),
        "sort_by": sort_field.value if sort_field is not DEFAULT_SORT_FIELD else None,
    }
    base_url = storage_base_url(api_prefix, request_params.network, request_params.contract_id)

    links = PaginationLinks(
        self_=Link(href=build_pagination_link_href(
            base_url, {**query_params, "cursor": request_params.cursor}
        ))
    )

    if len(results) >= request_params.limit:
        next_cursor = _boundary_cursor("next", results[-1], sort_field)
        links.next = Link(href=build_pagination_link_href(
            base_url, {**query_params, "cursor": next_cursor}
        ))

    if request_params.cursor and results:
        prev_cursor = _boundary_cursor("prev", results[0], sort_field)
        links.prev = Link(href=build_pagination_link_href(
            base_url, {**query_params, "cursor": prev_cursor}
        ))

    return links
