"""Tests for the row cell codec."""

from datetime import date, datetime, UTC
from decimal import Decimal

from bizledger.database.codec import (
    decode_row,
    encode_row,
    format_cell,
    optional_text,
    parse_bool,
    parse_date,
    parse_datetime,
    parse_decimal,
    parse_list,
)


class TestFormatCell:
    """Tests for single cell rendering."""

    def test_none_is_empty(self):
        assert format_cell(None) == ""

    def test_booleans_are_literals(self):
        assert format_cell(True) == "true"
        assert format_cell(False) == "false"

    def test_lists_are_json(self):
        assert format_cell(("rent", "office")) == '["rent", "office"]'
        assert format_cell([]) == "[]"

    def test_dates_are_iso(self):
        assert format_cell(date(2024, 3, 5)) == "2024-03-05"
        assert format_cell(datetime(2024, 3, 5, 12, 30, tzinfo=UTC)) == "2024-03-05T12:30:00+00:00"

    def test_decimal_keeps_precision(self):
        assert format_cell(Decimal("19.90")) == "19.90"


class TestRows:
    """Tests for encode_row/decode_row."""

    def test_encode_follows_header_order(self):
        row = encode_row({"b": 2, "a": "x"}, ("a", "b", "c"))
        assert row == ["x", "2", ""]

    def test_decode_pads_short_rows(self):
        """A row written before a column existed decodes that column as blank."""
        fields = decode_row(["id1", "Acme"], ("id", "name", "email"))
        assert fields == {"id": "id1", "name": "Acme", "email": ""}

    def test_decode_ignores_extra_cells(self):
        fields = decode_row(["id1", "Acme", "stray"], ("id", "name"))
        assert fields == {"id": "id1", "name": "Acme"}

    def test_decode_treats_none_as_blank(self):
        assert decode_row([None, "x"], ("a", "b")) == {"a": "", "b": "x"}


class TestParsers:
    """Tests for the cell parsers."""

    def test_optional_text(self):
        assert optional_text("") is None
        assert optional_text("note") == "note"

    def test_parse_bool_only_true_literal(self):
        assert parse_bool("true") is True
        assert parse_bool("TRUE") is True
        assert parse_bool("false") is False
        assert parse_bool("") is False
        assert parse_bool("yes") is False

    def test_parse_decimal(self):
        assert parse_decimal("12.50") == Decimal("12.50")
        assert parse_decimal("") == Decimal("0")
        assert parse_decimal("abc") == Decimal("0")
        assert parse_decimal("", default=Decimal("1")) == Decimal("1")

    def test_parse_list(self):
        assert parse_list('["a", "b"]') == ("a", "b")
        assert parse_list("") == ()
        assert parse_list("not json") == ()
        assert parse_list('{"a": 1}') == ()

    def test_parse_date_truncates_timestamps(self):
        assert parse_date("2024-03-05") == date(2024, 3, 5)
        assert parse_date("2024-03-05T10:00:00.000Z") == date(2024, 3, 5)
        assert parse_date("") is None
        assert parse_date("soon") is None

    def test_parse_datetime(self):
        value = parse_datetime("2024-03-05T12:30:00+00:00")
        assert value == datetime(2024, 3, 5, 12, 30, tzinfo=UTC)
        assert parse_datetime("") is None
        assert parse_datetime("garbage") is None
