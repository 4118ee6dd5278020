"""Tests for storage request parameter parsing."""

import pytest

from contract_storage.errors.api_errors import (
    CursorParameterMismatchError, InvalidCursorError, InvalidParameterError
)
from contract_storage.models.contract_data import SortDirection, SortField
from contract_storage.pagination.cursor import encode_cursor
from contract_storage.pagination.params import (
    DEFAULT_LIMIT, MAX_LIMIT, parse_limit, parse_request_params,
    parse_sort_direction, parse_sort_field
)

from ..fakes import CONTRACT_ID, hex_hash


def parse(**kwargs):
    return parse_request_params(network="mainnet", contract_id=CONTRACT_ID, **kwargs)


class TestParseLimit:
    """Test page size parsing."""

    def test_default(self):
        assert parse_limit(None) == DEFAULT_LIMIT == 20

    @pytest.mark.parametrize("raw,expected", [("1", 1), ("200", 200), (" 15 ", 15), ("+7", 7)])
    def test_valid(self, raw, expected):
        assert parse_limit(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "201", "-1", "invalid", "1.5", "", "1e2", "9" * 5000])
    def test_invalid(self, raw):
        """Out of range and non-integer limits are rejected with the raw value."""
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_limit(raw)

        assert exc_info.value.status == 400
        assert exc_info.value.detail == (
            f"Invalid limit={raw}, must be an integer between 1 and {MAX_LIMIT}"
        )


class TestParseSortField:
    """Test sort field parsing."""

    def test_default_is_key_hash(self):
        assert parse_sort_field(None) is SortField.KEY_HASH

    @pytest.mark.parametrize("raw", ["durability", "key_hash", "ttl", "updated_at"])
    def test_valid(self, raw):
        assert parse_sort_field(raw).value == raw

    def test_invalid_lists_choices(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_sort_field("invalid")

        assert exc_info.value.detail == (
            "Invalid sort_by parameter: invalid, must be one of: "
            "durability, key_hash, ttl, updated_at"
        )


class TestParseSortDirection:
    """Test sort direction parsing."""

    def test_default_is_desc(self):
        assert parse_sort_direction(None) is SortDirection.DESC

    def test_valid(self):
        assert parse_sort_direction("asc") is SortDirection.ASC
        assert parse_sort_direction("desc") is SortDirection.DESC

    def test_invalid_lists_choices(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_sort_direction("sideways")

        assert exc_info.value.detail == "Invalid order parameter: sideways, must be one of: asc, desc"

    def test_case_sensitive(self):
        with pytest.raises(InvalidParameterError):
            parse_sort_direction("ASC")


class TestParseRequestParams:
    """Test combined request parameter validation."""

    def test_defaults(self):
        params = parse()

        assert params.network == "mainnet"
        assert params.contract_id == CONTRACT_ID
        assert params.limit == 20
        assert params.sort_direction is SortDirection.DESC
        assert params.sort_field is SortField.KEY_HASH
        assert params.sort_db_field == "key_hash"
        assert params.cursor is None
        assert params.cursor_data is None

    @pytest.mark.parametrize("sort_by,column", [
        ("durability", "durability"),
        ("key_hash", "key_hash"),
        ("ttl", "live_until_ledger_sequence"),
        ("updated_at", "closed_at"),
    ])
    def test_sort_field_maps_to_column(self, sort_by, column):
        assert parse(sort_by=sort_by).sort_db_field == column

    def test_limit_checked_before_sort_by(self):
        """The first invalid parameter in check order is reported."""
        with pytest.raises(InvalidParameterError) as exc_info:
            parse(limit="0", sort_by="bogus", order="bogus")

        assert exc_info.value.detail.startswith("Invalid limit=0")

    def test_sort_by_checked_before_order(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            parse(sort_by="bogus", order="bogus")

        assert exc_info.value.detail.startswith("Invalid sort_by parameter")

    def test_order_checked_before_cursor(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            parse(order="bogus", cursor="invalid_cursor")

        assert exc_info.value.detail.startswith("Invalid order parameter")

    def test_invalid_cursor(self):
        with pytest.raises(InvalidCursorError) as exc_info:
            parse(cursor="invalid_cursor")

        assert exc_info.value.detail == "Invalid cursor: invalid_cursor"

    def test_empty_cursor_is_ignored(self):
        params = parse(cursor="")

        assert params.cursor is None
        assert params.cursor_data is None

    def test_cursor_is_decoded(self):
        cursor = encode_cursor("next", key_hash=hex_hash("aa"), sort_field=SortField.TTL, sort_value=None)

        params = parse(sort_by="ttl", cursor=cursor)

        assert params.cursor == cursor
        assert params.cursor_data.position.key_hash == hex_hash("aa")
        assert params.cursor_data.position.sort_value is None

    def test_cursor_from_other_sort_field_is_rejected(self):
        """A ttl cursor cannot continue an updated_at listing."""
        cursor = encode_cursor("next", key_hash=hex_hash("aa"), sort_field=SortField.TTL, sort_value=902)

        with pytest.raises(CursorParameterMismatchError) as exc_info:
            parse(sort_by="updated_at", cursor=cursor)

        assert exc_info.value.status == 400
        assert "sort_by" in exc_info.value.detail
        assert "updated_at" in exc_info.value.detail
        assert "ttl" in exc_info.value.detail

    def test_key_hash_cursor_rejected_for_sorted_request(self):
        """Cursors without sortField belong to key_hash listings."""
        cursor = encode_cursor("next", key_hash=hex_hash("aa"))

        with pytest.raises(CursorParameterMismatchError):
            parse(sort_by="durability", cursor=cursor)

    def test_sorted_cursor_rejected_for_default_sort(self):
        cursor = encode_cursor("next", key_hash=hex_hash("aa"), sort_field=SortField.DURABILITY, sort_value="temporary")

        with pytest.raises(CursorParameterMismatchError):
            parse(cursor=cursor)

    def test_cursor_direction_may_differ_from_order(self):
        """The order parameter is not checked against the cursor."""
        cursor = encode_cursor("prev", key_hash=hex_hash("aa"))

        params = parse(order="asc", cursor=cursor)

        assert params.sort_direction is SortDirection.ASC
        assert params.cursor_data.is_prev
