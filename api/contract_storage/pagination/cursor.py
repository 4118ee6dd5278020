"""Opaque cursor tokens for keyset pagination.

A cursor is base64-encoded JSON of the form::

    {"cursorType": "next", "sortField": "ttl",
     "position": {"keyHash": "<hex>", "sortValue": 901}}

``sortField`` and ``sortValue`` are omitted when paging by ``key_hash``.
``sortValue`` may be ``null`` only for ``ttl``. Integers that JSON numbers
cannot carry exactly are transported as decimal strings.
"""

import base64
import json
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Union

from pydantic import (
    BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr,
    ValidationError, model_validator
)
from pydantic_core import PydanticCustomError

from ..errors.api_errors import InvalidCursorError
from ..models.contract_data import DEFAULT_SORT_FIELD, SORT_COLUMNS, SortField


CursorType = Literal["next", "prev"]

MAX_SAFE_JSON_INTEGER = 2**53 - 1
BIGINT_MIN = -2**63
BIGINT_MAX = 2**63 - 1

_DECIMAL_INTEGER = re.compile(r"-?\d{1,40}")


class CursorPosition(BaseModel):
    """Boundary row of the page that issued the cursor."""

    model_config = ConfigDict(populate_by_name=True)

    key_hash: StrictStr = Field(alias="keyHash", min_length=1)
    sort_value: Optional[Union[StrictInt, StrictFloat, StrictStr]] = Field(default=None, alias="sortValue")


class CursorData(BaseModel):
    """Decoded cursor, validated against the domain of its sort field."""

    model_config = ConfigDict(populate_by_name=True)

    cursor_type: CursorType = Field(alias="cursorType")
    sort_field: Optional[SortField] = Field(default=None, alias="sortField")
    position: CursorPosition

    @property
    def effective_sort_field(self) -> SortField:
        return self.sort_field or DEFAULT_SORT_FIELD

    @property
    def is_prev(self) -> bool:
        return self.cursor_type == "prev"

    @model_validator(mode="after")
    def check_sort_value(self) -> "CursorData":
        field = self.effective_sort_field
        if field is SortField.KEY_HASH:
            return self

        if "sort_value" not in self.position.model_fields_set:
            raise PydanticCustomError(
                "sort_value_missing",
                "sortValue is required for sort field '{field}'",
                {"field": field.value}
            )

        value = self.position.sort_value
        column = SORT_COLUMNS[field]
        if value is None:
            if not column.nullable:
                raise PydanticCustomError(
                    "sort_value_null",
                    "sortValue for sort field '{field}' must not be null",
                    {"field": field.value}
                )
            return self

        if column.value_type == "string":
            if not isinstance(value, str):
                raise _type_mismatch(field, "a string")
            return self

        self.position.sort_value = _normalize_number(field, value)
        return self


def _type_mismatch(field: SortField, expected: str) -> PydanticCustomError:
    return PydanticCustomError(
        "sort_value_type",
        "sortValue for sort field '{field}' must be {expected}",
        {"field": field.value, "expected": expected}
    )


def _normalize_number(field: SortField, value: Union[int, float, str]) -> Union[int, float]:
    """Coerce a numeric sort value to the Python type bound for its column."""
    if isinstance(value, str):
        if not _DECIMAL_INTEGER.fullmatch(value):
            raise _type_mismatch(field, "a number")
        value = int(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise _type_mismatch(field, "a finite number")
        if field is SortField.TTL:
            if not value.is_integer():
                raise _type_mismatch(field, "an integer")
            value = int(value)

    if field is SortField.TTL and not BIGINT_MIN <= value <= BIGINT_MAX:
        raise _type_mismatch(field, "a 64-bit integer")
    if field is SortField.UPDATED_AT:
        try:
            datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise _type_mismatch(field, "a Unix timestamp")
    return value


def _json_safe(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_JSON_INTEGER:
        return str(value)
    return value


def encode_cursor(
    cursor_type: str,
    key_hash: str,
    sort_field: Optional[SortField] = None,
    sort_value: Any = None
) -> str:
    """Encode a pagination cursor.

    Args:
        cursor_type: ``"prev"`` for a backward cursor; anything else is ``"next"``
        key_hash: Tie-break key of the boundary row
        sort_field: Sort field the page was fetched under; omitted for key_hash
        sort_value: Boundary row's sort value (Unix seconds for updated_at)

    Returns:
        Base64 encoded cursor string
    """
    payload: Dict[str, Any] = {"cursorType": "prev" if cursor_type == "prev" else "next"}
    position: Dict[str, Any] = {"keyHash": key_hash}

    if sort_field is not None and sort_field is not SortField.KEY_HASH:
        payload["sortField"] = sort_field.value
        position["sortValue"] = _json_safe(sort_value)

    payload["position"] = position

    cursor_json = json.dumps(payload, separators=(",", ":"))
    return base64.b64encode(cursor_json.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> CursorData:
    """Decode and validate a pagination cursor.

    Args:
        cursor: Base64 encoded cursor string

    Returns:
        Decoded cursor data

    Raises:
        InvalidCursorError: If the cursor is malformed or its sort value does
            not fit the sort field
    """
    try:
        cursor_bytes = base64.b64decode(cursor.encode("ascii"), validate=True)
        payload = json.loads(cursor_bytes.decode("utf-8"))
    except (ValueError, UnicodeError) as e:
        raise InvalidCursorError(f"Invalid cursor: {cursor}") from e

    try:
        return CursorData.model_validate(payload)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"{loc}: {error['msg']}" if loc else error["msg"])
        raise InvalidCursorError("Invalid cursor: " + "; ".join(error_messages)) from e
