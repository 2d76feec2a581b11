"""Tests for row validation."""

from datetime import datetime

import pytest

from config.instrument_formats import (
    ByIndex,
    ByName,
    ColumnMapping,
    DataType,
    ExcelFormat,
    ValidationRule,
)
from pvdisconnect.ingestion.auto_detector import find_header_index
from pvdisconnect.ingestion.models import ParseErrorKind, ProcessingOptions
from pvdisconnect.ingestion.validator import get_cell, validate_row


@pytest.fixture
def simple_format():
    return ExcelFormat(
        name="Simple",
        columns=(
            ColumnMapping("Time", "timestamp", DataType.DATE, required=True),
            ColumnMapping("Volts", "voltage", DataType.NUMBER,
                          validation=ValidationRule(min=0, max=1500)),
            ColumnMapping("Amps", "current", DataType.NUMBER),
            ColumnMapping("Result", "pass_fail", DataType.BOOLEAN),
            ColumnMapping("Remarks", "notes", DataType.STRING,
                          validation=ValidationRule(pattern=r"^[A-Z]")),
        ),
    )


@pytest.fixture
def headers():
    return ["Time", "Volts", "Amps", "Result", "Remarks"]


# =============================================================================
# Cell access
# =============================================================================

class TestCellAccess:

    def test_by_index(self):
        assert get_cell([1, 2, 3], ByIndex(1)) == 2
        assert get_cell([1, 2, 3], ByIndex(5)) is None

    def test_by_name(self):
        assert get_cell([1, 2, 3], ByName("b"), ["a", "b", "c"]) == 2
        assert get_cell([1, 2, 3], ByName("z"), ["a", "b", "c"]) is None
        assert get_cell([1, 2, 3], ByName("b")) is None

    def test_by_name_short_row(self):
        assert get_cell([1], ByName("c"), ["a", "b", "c"]) is None

    def test_exact_header_preferred_over_substring(self):
        headers = ["Voltage (V) raw", "Voltage (V)"]
        assert find_header_index(headers, "voltage (v)") == 1

    def test_substring_header_match(self):
        assert find_header_index(["  DC Voltage (V) ", "x"], "Voltage (V)") == 0
        assert find_header_index(["x"], "Voltage") is None


# =============================================================================
# Row validation
# =============================================================================

class TestValidateRow:

    def test_valid_row(self, simple_format, headers):
        row = [datetime(2024, 1, 1, 12), 1000, "10.5", "Pass", "OK"]
        result = validate_row(row, simple_format, 2, headers)

        assert result.accepted
        record = result.record
        assert record.timestamp == datetime(2024, 1, 1, 12)
        assert record.voltage == 1000.0
        assert record.current == 10.5
        assert record.pass_fail is True
        assert record.notes == "OK"
        assert record.source_row == 2
        assert record.raw_source["Volts"] == 1000

    def test_derives_resistance_and_power(self, simple_format, headers):
        row = [datetime(2024, 1, 1), 100.0, 4.0, None, None]
        record = validate_row(row, simple_format, 2, headers).record
        assert record.resistance == pytest.approx(25.0)
        assert record.power == pytest.approx(400.0)

    def test_derivation_can_be_disabled(self, simple_format, headers):
        options = ProcessingOptions(derive_electrical=False)
        row = [datetime(2024, 1, 1), 100.0, 4.0, None, None]
        record = validate_row(row, simple_format, 2, headers, options).record
        assert record.resistance is None
        assert record.power is None

    def test_missing_required_field(self, simple_format, headers):
        row = [None, 1000, 10, "Pass", None]
        result = validate_row(row, simple_format, 7, headers)

        assert not result.accepted
        assert result.record is None
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.kind is ParseErrorKind.MISSING
        assert error.row == 7
        assert error.column == "Time"

    def test_uncoercible_required_field_is_missing(self, simple_format, headers):
        result = validate_row(["not a date", 1000, 10, None, None], simple_format, 3, headers)
        assert [e.kind for e in result.errors] == [ParseErrorKind.MISSING]
        assert result.errors[0].value == "not a date"

    def test_uncoercible_optional_field_is_omitted(self, simple_format, headers):
        row = [datetime(2024, 1, 1), 1000, "n/a", "maybe", None]
        result = validate_row(row, simple_format, 3, headers)
        assert result.accepted
        assert result.record.current is None
        assert result.record.pass_fail is None

    def test_range_error(self, simple_format, headers):
        row = [datetime(2024, 1, 1), 20000, 10, None, None]
        result = validate_row(row, simple_format, 4, headers)

        assert not result.accepted
        assert len(result.errors) == 1
        assert result.errors[0].kind is ParseErrorKind.RANGE
        assert result.errors[0].column == "Volts"
        assert result.errors[0].value == 20000.0

    def test_negative_value_below_minimum(self, simple_format, headers):
        result = validate_row([datetime(2024, 1, 1), -5, 10, None, None], simple_format, 4, headers)
        assert result.errors[0].kind is ParseErrorKind.RANGE

    def test_pattern_error(self, simple_format, headers):
        row = [datetime(2024, 1, 1), 1000, 10, None, "lowercase note"]
        result = validate_row(row, simple_format, 5, headers)
        assert [e.kind for e in result.errors] == [ParseErrorKind.FORMAT]

    def test_enumerated_values(self, headers):
        fmt = ExcelFormat(
            name="Enum",
            columns=(
                ColumnMapping("Time", "timestamp", DataType.DATE, required=True),
                ColumnMapping("Volts", "voltage", DataType.NUMBER),
                ColumnMapping("Remarks", "notes", DataType.STRING,
                              validation=ValidationRule(values=("ok", "retest"))),
            ),
        )
        ok = validate_row([datetime(2024, 1, 1), 1, None, None, "retest"], fmt, 2, headers)
        bad = validate_row([datetime(2024, 1, 1), 1, None, None, "other"], fmt, 3, headers)
        assert ok.accepted
        assert [e.kind for e in bad.errors] == [ParseErrorKind.VALIDATION]

    def test_row_without_voltage_or_current(self, simple_format, headers):
        row = [datetime(2024, 1, 1), None, None, "Pass", None]
        result = validate_row(row, simple_format, 9, headers)

        assert not result.accepted
        assert len(result.errors) == 1
        assert result.errors[0].kind is ParseErrorKind.MISSING
        assert result.errors[0].column is None
        assert result.errors[0].row == 9

    def test_current_alone_is_enough(self, simple_format, headers):
        result = validate_row([datetime(2024, 1, 1), None, 3.2, None, None], simple_format, 2, headers)
        assert result.accepted
        assert result.record.voltage is None

    def test_multiple_errors_in_one_row(self, simple_format, headers):
        row = [None, 20000, 10, None, "bad"]
        result = validate_row(row, simple_format, 2, headers)
        assert [e.kind for e in result.errors] == [
            ParseErrorKind.MISSING,
            ParseErrorKind.RANGE,
            ParseErrorKind.FORMAT,
        ]

    def test_index_format(self):
        fmt = ExcelFormat(
            name="Positional",
            columns=(
                ColumnMapping(0, "timestamp", DataType.DATE, required=True),
                ColumnMapping(1, "voltage", DataType.NUMBER, required=True),
                ColumnMapping(2, "current", DataType.NUMBER, required=True),
            ),
        )
        ok = validate_row([44562, "230", "5"], fmt, 2)
        short = validate_row([44562, "230"], fmt, 3)

        assert ok.record.timestamp == datetime(2022, 1, 1)
        assert short.errors[0].column == "Column 2"
        assert short.errors[0].kind is ParseErrorKind.MISSING

    def test_raw_source_keys(self, simple_format):
        row = [datetime(2024, 1, 1), 1, 2, None, None, "extra"]
        record = validate_row(row, simple_format, 2, ["Time", "Volts", "Amps", "", "Remarks"]).record
        assert record.raw_source["Time"] == datetime(2024, 1, 1)
        assert record.raw_source["Column 3"] is None
        assert record.raw_source["Column 5"] == "extra"
