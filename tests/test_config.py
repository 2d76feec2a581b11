"""Tests for format registry, testing standards and settings."""

import logging

import pytest

from config.config import ANALYSIS_CONFIG, INGESTION_CONFIG, configure_logging
from config.instrument_formats import (
    EXCEL_FORMATS,
    ByIndex,
    ByName,
    ColumnMapping,
    DataType,
    ExcelFormat,
    get_format,
    is_valid_format,
    list_all_formats,
)
from config import testing_standards
from config.testing_standards import STANDARD_CRITERIA, get_standard, get_standard_criteria

Standard = testing_standards.TestingStandard


class TestFormatRegistry:

    def test_registration_order(self):
        assert list_all_formats() == ["standard_v1", "fluke_1736", "keysight_34465a"]

    def test_lookup_by_key_or_name(self):
        assert get_format("fluke_1736") is EXCEL_FORMATS["fluke_1736"]
        assert get_format("Keysight 34465A DMM") is EXCEL_FORMATS["keysight_34465a"]
        assert get_format("nope") is None

    def test_required_header_names(self):
        assert EXCEL_FORMATS["standard_v1"].required_header_names() == [
            "timestamp", "voltage (v)", "current (a)"
        ]
        assert EXCEL_FORMATS["fluke_1736"].required_header_names() == []

    def test_every_registered_format_is_valid(self):
        assert all(is_valid_format(fmt) for fmt in EXCEL_FORMATS.values())
        assert not is_valid_format(ExcelFormat(name="Empty"))
        assert not is_valid_format({"name": "dict"})


class TestColumnMapping:

    def test_shorthand_sources_are_normalized(self):
        assert ColumnMapping("Voltage", "voltage").source == ByName("Voltage")
        assert ColumnMapping(3, "voltage").source == ByIndex(3)
        assert ColumnMapping(3, "voltage").column_label == "Column 3"

    def test_data_type_from_string(self):
        assert ColumnMapping("V", "voltage", "number").data_type is DataType.NUMBER

    @pytest.mark.parametrize("kwargs", [
        {"source": "V", "target_field": "wattage"},
        {"source": True, "target_field": "voltage"},
        {"source": 1.5, "target_field": "voltage"},
        {"source": "V", "target_field": "voltage", "data_type": "complex"},
    ])
    def test_invalid_mappings(self, kwargs):
        with pytest.raises(ValueError):
            ColumnMapping(**kwargs)

    def test_mappings_are_immutable(self):
        mapping = ColumnMapping("V", "voltage")
        with pytest.raises(AttributeError):
            mapping.required = True


class TestTestingStandards:

    @pytest.mark.parametrize("identifier", [
        Standard.IEC_60947_3, "IEC_60947_3", "iec 60947-3", " IEC 60947-3 ",
    ])
    def test_get_standard(self, identifier):
        assert get_standard(identifier) is Standard.IEC_60947_3

    def test_unknown_standard(self):
        assert get_standard("ISO 9001") is None
        assert get_standard(None) is None
        assert get_standard_criteria("ISO 9001").min_pass_rate == 95.0

    def test_ul_98b_endurance_count(self):
        assert STANDARD_CRITERIA[Standard.UL_98B].min_measurements == 100
        assert Standard.UL_98B.display_name == "UL 98B"


class TestSettings:

    def test_default_thresholds(self):
        assert INGESTION_CONFIG["error_rate_threshold"] == pytest.approx(0.10)
        assert ANALYSIS_CONFIG["outlier_iqr_multiplier"] == pytest.approx(1.5)

    def test_configure_logging(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging("debug")

        assert calls["level"] == logging.DEBUG
