"""Data structures shared by the ingestion pipeline."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from config.config import INGESTION_CONFIG
from config.instrument_formats import ExcelFormat

from ..analysis.electrical import calculate_power, calculate_resistance


class ParseErrorKind(Enum):
    """Category of an ingestion error."""
    FORMAT = "format"
    VALIDATION = "validation"
    MISSING = "missing"
    RANGE = "range"
    TYPE = "type"


@dataclass(frozen=True)
class ParseError:
    """Error raised against one spreadsheet row (row 0 for file-level errors)."""
    row: int
    message: str
    kind: ParseErrorKind
    column: Optional[str] = None
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "column": self.column,
            "value": self.value,
            "message": self.message,
            "type": self.kind.value,
        }


@dataclass
class MeasurementRecord:
    """One reading captured during a device test.

    ``sequence_number`` is assigned on import in acceptance order.
    ``raw_source`` keeps the original row values for audit.
    """
    timestamp: Optional[datetime] = None
    voltage: Optional[float] = None
    current: Optional[float] = None
    resistance: Optional[float] = None
    power: Optional[float] = None
    frequency: Optional[float] = None
    phase_angle: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pass_fail: Optional[bool] = None
    notes: Optional[str] = None
    sequence_number: Optional[int] = None
    source_row: Optional[int] = None
    raw_source: Dict[str, Any] = field(default_factory=dict)

    def is_complete(self) -> bool:
        """Has a timestamp and at least one of voltage/current."""
        return self.timestamp is not None and (
            self.voltage is not None or self.current is not None
        )

    def derive_electrical(self) -> "MeasurementRecord":
        """Fill absent resistance/power from voltage and current.

        Values supplied by the source file are never overwritten.
        """
        if self.voltage is None or self.current is None:
            return self
        if self.resistance is None:
            self.resistance = calculate_resistance(self.voltage, self.current)
        if self.power is None:
            self.power = calculate_power(self.voltage, self.current)
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class ProcessingOptions:
    """Options controlling how an uploaded workbook is read.

    Row indices are 0-based. ``data_start_row`` defaults to the row after
    the header. ``error_rate_threshold`` defaults to INGESTION_CONFIG.
    """
    format: Optional[Union[str, ExcelFormat]] = None
    sheet_name: Optional[str] = None
    header_row: int = INGESTION_CONFIG["default_header_row"]
    data_start_row: Optional[int] = None
    max_rows: Optional[int] = None
    decimal_separator: str = "."
    thousand_separator: str = ""
    skip_empty_rows: bool = True
    trim_values: bool = True
    derive_electrical: bool = True
    error_rate_threshold: Optional[float] = None

    def __post_init__(self):
        if self.header_row < 0:
            raise ValueError("header_row must be >= 0")
        if self.data_start_row is not None and self.data_start_row < 0:
            raise ValueError("data_start_row must be >= 0")
        if self.max_rows is not None and self.max_rows < 0:
            raise ValueError("max_rows must be >= 0")
        if self.decimal_separator not in (".", ","):
            raise ValueError(f"Unsupported decimal separator: {self.decimal_separator!r}")

    @property
    def first_data_row(self) -> int:
        if self.data_start_row is not None:
            return self.data_start_row
        return self.header_row + 1


@dataclass
class RowResult:
    """Outcome of validating a single row."""
    record: Optional[MeasurementRecord]
    errors: List[ParseError] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.record is not None and not self.errors


@dataclass
class ExcelMetadata:
    """Descriptive information about a parsed upload.

    ``total_rows`` counts the data rows actually processed: blank rows
    skipped by ``skip_empty_rows`` and rows past ``max_rows`` are not
    included, so it is the denominator of the error-rate guard.
    ``sheet_rows`` is every row from the first data row to the end of the
    sheet, blank or not.
    """
    filename: str
    file_size: int
    total_rows: int
    valid_rows: int
    invalid_rows: int
    headers: List[str]
    detected_format: Optional[ExcelFormat] = None
    sheet_name: Optional[str] = None
    error_count: int = 0
    sheet_rows: int = 0


@dataclass
class ExcelParseResult:
    """Result of parsing an uploaded workbook into measurement records."""
    success: bool
    data: List[MeasurementRecord] = field(default_factory=list)
    metadata: Optional[ExcelMetadata] = None
    errors: List[ParseError] = field(default_factory=list)
