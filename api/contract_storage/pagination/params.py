"""Request parameter parsing for the storage endpoint."""

import re
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from ..errors.api_errors import CursorParameterMismatchError, InvalidParameterError
from ..models.contract_data import (
    DEFAULT_SORT_DIRECTION, DEFAULT_SORT_FIELD, SORT_COLUMNS, SortDirection, SortField
)
from .cursor import CursorData, decode_cursor


MIN_LIMIT = 1
MAX_LIMIT = 200
DEFAULT_LIMIT = 20

_INTEGER = re.compile(r"[+-]?\d{1,10}")


class RequestParams(BaseModel):
    """Validated, mutually consistent parameters for one page request."""

    network: str
    contract_id: str
    limit: int = Field(ge=MIN_LIMIT, le=MAX_LIMIT)
    sort_direction: SortDirection = DEFAULT_SORT_DIRECTION
    sort_field: SortField = DEFAULT_SORT_FIELD
    sort_db_field: str
    cursor: Optional[str] = None
    cursor_data: Optional[CursorData] = None


def _choices(values: Iterable[str]) -> str:
    return ", ".join(values)


def parse_limit(limit: Optional[str]) -> int:
    """Parse the page size, defaulting when absent."""
    if limit is None:
        return DEFAULT_LIMIT
    raw = limit.strip()
    if not _INTEGER.fullmatch(raw) or not MIN_LIMIT <= int(raw) <= MAX_LIMIT:
        raise InvalidParameterError(
            f"Invalid limit={limit}, must be an integer between {MIN_LIMIT} and {MAX_LIMIT}"
        )
    return int(raw)


def parse_sort_field(sort_by: Optional[str]) -> SortField:
    """Parse the sort field, defaulting to key_hash."""
    if sort_by is None:
        return DEFAULT_SORT_FIELD
    try:
        return SortField(sort_by.strip())
    except ValueError:
        raise InvalidParameterError(
            f"Invalid sort_by parameter: {sort_by}, must be one of: "
            f"{_choices(field.value for field in SortField)}"
        )


def parse_sort_direction(order: Optional[str]) -> SortDirection:
    """Parse the sort direction, defaulting to desc."""
    if order is None:
        return DEFAULT_SORT_DIRECTION
    try:
        return SortDirection(order.strip())
    except ValueError:
        raise InvalidParameterError(
            f"Invalid order parameter: {order}, must be one of: "
            f"{_choices(direction.value for direction in SortDirection)}"
        )


def parse_request_params(
    network: str,
    contract_id: str,
    limit: Optional[str] = None,
    order: Optional[str] = None,
    sort_by: Optional[str] = None,
    cursor: Optional[str] = None
) -> RequestParams:
    """Validate raw query parameters into RequestParams.

    Parameters are checked in order limit, sort_by, order, cursor; the first
    failure is raised. A cursor is only accepted when it was issued under the
    same sort field as the current request.

    Raises:
        InvalidParameterError: For a malformed limit, sort_by or order
        InvalidCursorError: For a cursor that fails to decode or validate
        CursorParameterMismatchError: For a cursor issued under another sort_by
    """
    page_size = parse_limit(limit)
    sort_field = parse_sort_field(sort_by)
    sort_direction = parse_sort_direction(order)

    cursor = cursor.strip() if cursor else None
    cursor_data = None
    if cursor:
        cursor_data = decode_cursor(cursor)
        if cursor_data.effective_sort_field is not sort_field:
            raise CursorParameterMismatchError(
                "sort_by", sort_field.value, cursor_data.effective_sort_field.value
            )

    return RequestParams(
        network=network,
        contract_id=contract_id,
        limit=page_size,
        sort_direction=sort_direction,
        sort_field=sort_field,
        sort_db_field=SORT_COLUMNS[sort_field].name,
        cursor=cursor or None,
        cursor_data=cursor_data
    )
