"""Pytest configuration and shared fixtures."""

import io
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd
import pytest

from config.instrument_formats import EXCEL_FORMATS
from pvdisconnect.ingestion.models import MeasurementRecord

STANDARD_HEADERS = [
    "Timestamp",
    "Voltage (V)",
    "Current (A)",
    "Resistance (Ω)",
    "Power (W)",
    "Temperature (°C)",
    "Humidity (%)",
    "Pass/Fail",
    "Notes",
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =============================================================================
# Workbook builders
# =============================================================================

def build_xlsx(sheets: Dict[str, List[List[Any]]]) -> bytes:
    """Write sheets of raw rows (header included) to xlsx bytes."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return buffer.getvalue()


def build_csv(rows: List[List[Any]], delimiter: str = ",") -> bytes:
    lines = [delimiter.join("" if cell is None else str(cell) for cell in row) for row in rows]
    return ("\n".join(lines) + "\n").encode("utf-8")


def standard_row(
    timestamp: datetime,
    voltage: Optional[float] = 1000.0,
    current: Optional[float] = 32.0,
    pass_fail: Optional[str] = "Pass",
    notes: Optional[str] = None
) -> List[Any]:
    return [timestamp, voltage, current, None, None, 25.0, 45.0, pass_fail, notes]


@pytest.fixture
def make_xlsx():
    """Factory building xlsx bytes from rows (single sheet) or a sheet dict."""
    def _make(rows=None, sheet_name: str = "Sheet1", sheets=None) -> bytes:
        if sheets is None:
            sheets = {sheet_name: rows}
        return build_xlsx(sheets)
    return _make


@pytest.fixture
def make_csv():
    """Factory building CSV bytes from rows."""
    return build_csv


@pytest.fixture
def base_time():
    return datetime(2024, 1, 15, 10, 0, 0)


@pytest.fixture
def standard_format():
    return EXCEL_FORMATS["standard_v1"]


@pytest.fixture
def standard_rows(base_time):
    """Header plus 20 valid rows in the laboratory template."""
    rows = [list(STANDARD_HEADERS)]
    for i in range(20):
        rows.append(standard_row(
            base_time + timedelta(seconds=10 * i),
            voltage=1000.0 + i,
            current=32.0 + i / 10,
            pass_fail="Pass" if i % 5 else "Fail",
        ))
    return rows


# =============================================================================
# Measurement records
# =============================================================================

@pytest.fixture
def sample_records(base_time):
    """Ten accepted-looking records, one failed, one without a verdict."""
    records = []
    for i in range(10):
        records.append(MeasurementRecord(
            timestamp=base_time + timedelta(seconds=i),
            voltage=1000.0 + i,
            current=10.0,
            resistance=(1000.0 + i) / 10.0,
            power=(1000.0 + i) * 10.0,
            temperature=25.0,
            pass_fail=(i != 3) if i != 9 else None,
            notes="retest" if i == 3 else None,
            sequence_number=i + 1,
        ))
    return records


@pytest.fixture
def standard_headers():
    return list(STANDARD_HEADERS)


@pytest.fixture
def make_standard_row():
    return standard_row
