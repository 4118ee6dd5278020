"""Keyset page query construction for contract data.

Every ordering is ``(sort column, key_hash)`` so that the order is total even
when the sort column repeats. ``live_until_ledger_sequence`` is nullable:
ascending order puts NULLs last and descending puts them first, which keeps a
descending walk the exact mirror of an ascending one.

A ``prev`` cursor is served by walking the inverted direction from the cursor
(so ``LIMIT`` keeps the rows closest to it) and reversing the fetched rows
afterwards.

User-supplied values are always bound as ``$n`` parameters; only column names
from ``SORT_COLUMNS`` are ever interpolated into the query text.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Tuple

from ..errors.api_errors import InternalError
from ..models.contract_data import SORT_COLUMNS, SortColumn, SortDirection, SortField
from .params import RequestParams


SELECT_COLUMNS = (
    "cd.contract_id",
    "cd.key_hash",
    "cd.durability",
    "cd.key_symbol",
    "cd.key",
    "cd.val",
    "cd.closed_at",
    "cd.live_until_ledger_sequence",
)

_ALLOWED_COLUMNS = frozenset(column.name for column in SORT_COLUMNS.values())


@dataclass(frozen=True)
class PageQuery:
    """SQL text, its bound parameters and whether rows must be reversed."""
    query: str
    params: Tuple[Any, ...]
    reverse_results: bool


class ContractDataQueryBuilder:
    """Builds the single range query that fetches one page of contract data."""

    def __init__(self, params: RequestParams, latest_ledger_sequence: int):
        self.request = params
        # $1 is the contract id, $2 the latest ledger sequence
        self._values: List[Any] = [params.contract_id, latest_ledger_sequence]
        self.column = self._resolve_column(params.sort_field)

    @staticmethod
    def _resolve_column(sort_field: SortField) -> SortColumn:
        column = SORT_COLUMNS.get(sort_field)
        if column is None or column.name not in _ALLOWED_COLUMNS:
            raise InternalError(f"No storage column for sort field {sort_field!r}")
        return column

    def _add_param(self, value: Any) -> str:
        self._values.append(value)
        return f"${len(self._values)}"

    @property
    def fetch_direction(self) -> SortDirection:
        """Direction rows are read in: inverted when walking back from a prev cursor."""
        cursor_data = self.request.cursor_data
        if cursor_data is not None and cursor_data.is_prev:
            return self.request.sort_direction.inverted()
        return self.request.sort_direction

    def _bind_sort_value(self, value: Any) -> Any:
        """Convert a cursor sort value into the column's Python type."""
        if self.request.sort_field is SortField.UPDATED_AT:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if self.request.sort_field is SortField.TTL:
            return int(value)
        return str(value)

    def build_order_clause(self, direction: SortDirection) -> str:
        keyword = direction.value.upper()
        if self.request.sort_field is SortField.KEY_HASH:
            return f"ORDER BY cd.key_hash {keyword}"

        nulls = ""
        if self.column.nullable:
            nulls = " NULLS LAST" if direction is SortDirection.ASC else " NULLS FIRST"
        return f"ORDER BY cd.{self.column.name} {keyword}{nulls}, cd.key_hash {keyword}"

    def build_keyset_condition(self, direction: SortDirection) -> str:
        """Predicate selecting rows strictly after the cursor in ``direction``."""
        cursor_data = self.request.cursor_data
        if cursor_data is None:
            return ""

        op = ">" if direction is SortDirection.ASC else "<"
        position = cursor_data.position

        if self.request.sort_field is SortField.KEY_HASH:
            return f"cd.key_hash {op} {self._add_param(position.key_hash)}"

        col = f"cd.{self.column.name}"

        if position.sort_value is None:
            # Cursor sits inside the NULL group: NULLs are last ascending, first descending
            key_hash = self._add_param(position.key_hash)
            if direction is SortDirection.ASC:
                return f"({col} IS NULL AND cd.key_hash > {key_hash})"
            return f"(({col} IS NULL AND cd.key_hash < {key_hash}) OR {col} IS NOT NULL)"

        value = self._add_param(self._bind_sort_value(position.sort_value))
        key_hash = self._add_param(position.key_hash)
        condition = f"{col} {op} {value} OR ({col} = {value} AND cd.key_hash {op} {key_hash})"
        if self.column.nullable and direction is SortDirection.ASC:
            condition += f" OR {col} IS NULL"
        return f"({condition})"

    def build(self) -> PageQuery:
        direction = self.fetch_direction

        conditions = ["cd.contract_id = $1"]
        keyset = self.build_keyset_condition(direction)
        if keyset:
            conditions.append(keyset)

        columns = ",\n                ".join(SELECT_COLUMNS)
        where_clause = "\n              AND ".join(conditions)
        query = f"""
            SELECT
                {columns},
                (cd.live_until_ledger_sequence < $2) AS expired
            FROM contract_data cd
            WHERE {where_clause}
            {self.build_order_clause(direction)}
            LIMIT {self._add_param(self.request.limit)}
        """

        reverse_results = self.request.cursor_data is not None and self.request.cursor_data.is_prev
        return PageQuery(
            query=query.strip(),
            params=tuple(self._values),
            reverse_results=reverse_results
        )


def build_contract_data_query(params: RequestParams, latest_ledger_sequence: int) -> PageQuery:
    """Build the page query for validated request parameters."""
    return ContractDataQueryBuilder(params, latest_ledger_sequence).build()
