"""Export measurement records to spreadsheet rows and files.

``measurements_to_export_rows`` is the inverse of row validation for a
given format: its output, written to a sheet, re-imports with the same
format into equivalent records.
"""

import io
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from config.config import EXPORT_CONFIG
from config.instrument_formats import DataType, ExcelFormat

from ..analysis.session_stats import SessionStatistics, compute_session_statistics
from .models import MeasurementRecord

logger = logging.getLogger(__name__)

MEASUREMENT_HEADERS = [
    "Sequence",
    "Timestamp",
    "Voltage (V)",
    "Current (A)",
    "Resistance (Ω)",
    "Temperature (°C)",
    "Notes",
]


def _export_value(value: Any, data_type: DataType) -> Any:
    if value is None:
        return ""
    if data_type is DataType.DATE and isinstance(value, datetime):
        return value.isoformat()
    if data_type is DataType.BOOLEAN:
        return "Pass" if value else "Fail"
    return value


def measurements_to_export_rows(
    records: Sequence[MeasurementRecord],
    fmt: ExcelFormat
) -> List[List[Any]]:
    """Convert records to a header row plus one row per record.

    Headers are the format's source column names (``Column {i}`` for
    positional columns). Dates become ISO-8601 strings, booleans
    ``Pass``/``Fail`` and absent values empty strings.
    """
    headers = [col.column_label for col in fmt.columns]
    rows = [
        [_export_value(getattr(record, col.target_field), col.data_type) for col in fmt.columns]
        for record in records
    ]
    return [headers] + rows


def write_rows_to_excel(rows: List[List[Any]], sheet_name: Optional[str] = None) -> bytes:
    """Write rows to a single-sheet xlsx workbook and return its bytes."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(
            writer,
            sheet_name=sheet_name or EXPORT_CONFIG["data_sheet_name"],
            header=False,
            index=False,
        )
    return buffer.getvalue()


def write_rows_to_csv(rows: List[List[Any]]) -> str:
    """Write rows as CSV text."""
    return pd.DataFrame(rows).to_csv(header=False, index=False)


# ============================================================================
# SESSION WORKBOOK
# ============================================================================

def _naive(ts: Optional[datetime]) -> Optional[datetime]:
    """Excel cells cannot hold tz-aware datetimes; store them as UTC."""
    if ts is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def _format_number(value: Any) -> Any:
    if isinstance(value, float):
        return f"{value:.4f}"
    return value


def _session_info_rows(
    records: Sequence[MeasurementRecord],
    statistics: SessionStatistics,
    session_info: Dict[str, Any]
) -> List[List[Any]]:
    rows = [["Session Information", ""]]
    rows.extend([key, value] for key, value in session_info.items())
    rows.append(["Total Measurements", len(records)])
    rows.append(["", ""])
    rows.append(["Summary Statistics", ""])

    summary = statistics.to_dict()
    for key in ("total_measurements", "pass_count", "fail_count", "pass_rate",
                "first_timestamp", "last_timestamp", "duration", "sampling_rate"):
        value = summary[key]
        rows.append([key, "N/A" if value is None else _format_number(value)])

    for channel in ("voltage", "current", "resistance", "power"):
        stats = summary[channel]
        if stats is None:
            continue
        for stat_name in ("mean", "min", "max", "std_dev"):
            rows.append([f"{stat_name}_{channel}", _format_number(stats[stat_name])])

    return rows


def _measurement_rows(records: Sequence[MeasurementRecord]) -> List[List[Any]]:
    rows = [MEASUREMENT_HEADERS]
    for record in records:
        rows.append([
            record.sequence_number,
            _naive(record.timestamp),
            record.voltage,
            record.current,
            record.resistance if record.resistance is not None else "",
            record.temperature if record.temperature is not None else "",
            record.notes or "",
        ])
    return rows


def _analysis_rows(statistics: SessionStatistics) -> List[List[Any]]:
    rows = [["Statistical Analysis", ""]]
    for channel, label in (("voltage", "Voltage"), ("current", "Current")):
        stats = statistics.channel(channel)
        rows.append([f"{label} Statistics", ""])
        if stats is None:
            rows.extend([
                [f"Average {label}", "N/A"],
                [f"Min {label}", "N/A"],
                [f"Max {label}", "N/A"],
                [f"{label} Range", "N/A"],
            ])
        else:
            rows.extend([
                [f"Average {label}", _format_number(stats.mean)],
                [f"Min {label}", _format_number(stats.min)],
                [f"Max {label}", _format_number(stats.max)],
                [f"{label} Range", _format_number(stats.range)],
            ])
        rows.append(["", ""])
    return rows[:-1]


def export_session_workbook(
    records: Sequence[MeasurementRecord],
    statistics: Optional[SessionStatistics] = None,
    session_info: Optional[Dict[str, Any]] = None
) -> bytes:
    """Build a session report workbook.

    Sheets: session information with summary statistics, the measurement
    table, and (with more than one record) a voltage/current analysis.

    Args:
        records: Measurements in sequence order
        statistics: Precomputed summary (computed from records if None)
        session_info: Ordered key/value details (session name, device, ...)

    Returns:
        xlsx file content
    """
    if statistics is None:
        statistics = compute_session_statistics(list(records))
    session_info = session_info or {}

    sheets = [
        (EXPORT_CONFIG["session_info_sheet"], _session_info_rows(records, statistics, session_info)),
        (EXPORT_CONFIG["measurements_sheet"], _measurement_rows(records)),
    ]
    if len(records) > 1:
        sheets.append((EXPORT_CONFIG["analysis_sheet"], _analysis_rows(statistics)))

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, rows in sheets:
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)

    logger.info("Exported session workbook with %d measurements", len(records))
    return buffer.getvalue()
