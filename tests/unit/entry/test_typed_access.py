"""
Tests for typed, fallible field access on entries.
"""

import math

import pytest

from nginxlog.core.entry import Entry
from nginxlog.core.exceptions import FieldNotFound, FieldParseError


@pytest.fixture
def entry() -> Entry:
    return Entry.from_fields({
        "status": "200",
        "body_bytes_sent": "5000000000",
        "request_time": "0.125",
        "remote_user": "-",
        "padded": " 42",
        "underscored": "1_000",
    })


class TestFieldAccess:
    """Test string and numeric accessors."""

    def test_field_returns_raw_string(self, entry: Entry) -> None:
        assert entry.field("status") == "200"
        assert entry["remote_user"] == "-"

    def test_missing_field_raises(self, entry: Entry) -> None:
        """Test a missing field is an error naming the field."""
        with pytest.raises(FieldNotFound) as exc_info:
            entry.field("upstream_addr")

        assert exc_info.value.field == "upstream_addr"
        assert exc_info.value.details == {"field": "upstream_addr"}
        assert str(exc_info.value) == "field 'upstream_addr' not found"

    def test_missing_field_is_key_error(self, entry: Entry) -> None:
        """Test mapping-style access behaves like a dict."""
        with pytest.raises(KeyError):
            entry["upstream_addr"]
        assert entry.get("upstream_addr") is None
        assert "upstream_addr" not in entry

    def test_int_field(self, entry: Entry) -> None:
        assert entry.int_field("status") == 200

    def test_int_field_rejects_values_beyond_32_bits(self, entry: Entry) -> None:
        """Test int_field is range checked while int64_field accepts the value."""
        with pytest.raises(FieldParseError) as exc_info:
            entry.int_field("body_bytes_sent")

        assert exc_info.value.target_type == "int32"
        assert entry.int64_field("body_bytes_sent") == 5000000000

    def test_int64_field_range(self) -> None:
        entry = Entry({"big": str(2**63), "max": str(2**63 - 1), "min": str(-(2**63))})

        assert entry.int64_field("max") == 2**63 - 1
        assert entry.int64_field("min") == -(2**63)
        with pytest.raises(FieldParseError):
            entry.int64_field("big")

    def test_signed_integers(self) -> None:
        entry = Entry({"neg": "-17", "pos": "+17"})

        assert entry.int_field("neg") == -17
        assert entry.int_field("pos") == 17

    @pytest.mark.parametrize("name", ["remote_user", "padded", "underscored", "request_time"])
    def test_int_field_parse_error(self, entry: Entry, name: str) -> None:
        """Test unparseable integers carry field, value and target type."""
        with pytest.raises(FieldParseError) as exc_info:
            entry.int_field(name)

        error = exc_info.value
        assert error.field == name
        assert error.value == entry.field(name)
        assert error.target_type == "int32"
        assert error.error_code == "field_parse_error"

    def test_float_field(self, entry: Entry) -> None:
        assert entry.float_field("request_time") == 0.125
        assert entry.float_field("status") == 200.0

    @pytest.mark.parametrize(
        "raw,expected",
        [("1e3", 1000.0), ("-.5", -0.5), ("5.", 5.0), ("inf", math.inf)],
    )
    def test_float_syntax(self, raw: str, expected: float) -> None:
        assert Entry({"v": raw}).float_field("v") == expected

    def test_float_nan(self) -> None:
        assert math.isnan(Entry({"v": "NaN"}).float_field("v"))

    @pytest.mark.parametrize("name", ["remote_user", "padded", "underscored"])
    def test_float_field_parse_error(self, entry: Entry, name: str) -> None:
        with pytest.raises(FieldParseError) as exc_info:
            entry.float_field(name)

        assert exc_info.value.field == name
        assert exc_info.value.target_type == "float64"

    def test_numeric_access_on_missing_field(self, entry: Entry) -> None:
        """Test numeric accessors report missing fields, never a default."""
        for accessor in (entry.int_field, entry.int64_field, entry.float_field):
            with pytest.raises(FieldNotFound):
                accessor("missing")

    def test_parse_error_is_value_error(self, entry: Entry) -> None:
        with pytest.raises(ValueError):
            entry.int_field("remote_user")
