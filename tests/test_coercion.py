"""Tests for cell value coercion."""

from datetime import date, datetime, timezone

import numpy as np
import pandas as pd
import pytest

from config.instrument_formats import DataType
from pvdisconnect.ingestion.coercion import (
    coerce_value,
    excel_serial_to_datetime,
    is_blank,
    parse_boolean,
    parse_date,
    parse_number,
    parse_string,
)
from pvdisconnect.ingestion.models import ProcessingOptions


# =============================================================================
# Dates
# =============================================================================

class TestParseDate:

    def test_serial_date(self):
        assert parse_date(44562) == datetime(2022, 1, 1)
        assert excel_serial_to_datetime(44562) == datetime(2022, 1, 1)

    def test_fractional_serial_date(self):
        assert parse_date(44562.5) == datetime(2022, 1, 1, 12, 0, 0)

    def test_native_values(self):
        ts = datetime(2024, 3, 1, 9, 30)
        assert parse_date(ts) is ts
        assert parse_date(pd.Timestamp(ts)) == ts
        assert parse_date(date(2024, 3, 1)) == datetime(2024, 3, 1)

    def test_iso_strings(self):
        assert parse_date("2024-01-15T10:30:00") == datetime(2024, 1, 15, 10, 30)
        assert parse_date("2024-01-15 10:30:00") == datetime(2024, 1, 15, 10, 30)
        assert parse_date("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text,expected", [
        ("2024-01-15", datetime(2024, 1, 15)),
        ("01/15/2024", datetime(2024, 1, 15)),
        ("01-15-2024", datetime(2024, 1, 15)),
        ("2024/01/15", datetime(2024, 1, 15)),
    ])
    def test_common_patterns(self, text, expected):
        assert parse_date(text) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "yesterday", "13/45/2024", float("nan"), float("inf"),
        True, pd.NaT, 1e20, [2024, 1, 1],
    ])
    def test_unparseable_returns_none(self, value):
        assert parse_date(value) is None


# =============================================================================
# Numbers
# =============================================================================

class TestParseNumber:

    def test_native_numbers(self):
        assert parse_number(12) == 12.0
        assert parse_number(np.float64(1.5)) == 1.5
        assert parse_number(np.int64(7)) == 7.0

    def test_strings(self):
        assert parse_number("1000.5") == pytest.approx(1000.5)
        assert parse_number("  -3.25 ") == pytest.approx(-3.25)
        assert parse_number("12.5 V") == pytest.approx(12.5)

    def test_scientific_notation(self):
        assert parse_number("1.5E-03") == pytest.approx(0.0015)

    def test_thousand_separator(self):
        assert parse_number("1,234.5", thousand_separator=",") == pytest.approx(1234.5)

    def test_decimal_comma(self):
        assert parse_number("1.234,5", decimal_separator=",") == pytest.approx(1234.5)
        assert parse_number("10,2", decimal_separator=",") == pytest.approx(10.2)

    @pytest.mark.parametrize("value", [
        None, "", "abc", "-", float("nan"), float("inf"), "inf", True, object(),
    ])
    def test_unparseable_returns_none(self, value):
        assert parse_number(value) is None


# =============================================================================
# Booleans and strings
# =============================================================================

class TestParseBoolean:

    @pytest.mark.parametrize("value", ["Pass", "PASS", "pass", 1, True, "yes", "Y", "passed", "1", 2.5])
    def test_true_values(self, value):
        assert parse_boolean(value) is True

    @pytest.mark.parametrize("value", ["Fail", 0, False, "no", "N", "failed", "0", 0.0])
    def test_false_values(self, value):
        assert parse_boolean(value) is False

    @pytest.mark.parametrize("value", ["maybe", None, "", float("nan"), object()])
    def test_unknown_values(self, value):
        assert parse_boolean(value) is None

    def test_numpy_bool(self):
        assert parse_boolean(np.bool_(True)) is True


class TestParseString:

    def test_trim_default(self):
        assert parse_string("  note ") == "note"

    def test_no_trim(self):
        assert parse_string("  note ", trim=False) == "  note "

    def test_stringifies(self):
        assert parse_string(42) == "42"
        assert parse_string(None) is None


# =============================================================================
# Dispatch
# =============================================================================

class TestCoerceValue:

    def test_dispatch_by_type(self):
        assert coerce_value("12", DataType.NUMBER) == 12.0
        assert coerce_value("Pass", DataType.BOOLEAN) is True
        assert coerce_value(44562, DataType.DATE) == datetime(2022, 1, 1)
        assert coerce_value(" x ", DataType.STRING) == "x"

    def test_options_are_applied(self):
        options = ProcessingOptions(decimal_separator=",", trim_values=False)
        assert coerce_value("3,5", DataType.NUMBER, options) == pytest.approx(3.5)
        assert coerce_value(" x ", DataType.STRING, options) == " x "

    @pytest.mark.parametrize("value,expected", [
        (None, True),
        ("", True),
        ("  ", True),
        (float("nan"), True),
        (pd.NaT, True),
        (0, False),
        ("0", False),
        (False, False),
    ])
    def test_is_blank(self, value, expected):
        assert is_blank(value) is expected
