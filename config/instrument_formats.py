"""Instrument Spreadsheet Format Registry.

Catalog of known spreadsheet column layouts produced by test instruments
and data loggers used for PV disconnect-device testing. Each format is an
ordered list of column mappings from a source column (header name or
0-based index) to a measurement field.

Registration order matters: format detection returns the first format
whose required headers are all present.

Supported layouts:
- Standard Format V1 (laboratory template)
- Fluke 1736 Power Logger (positional export)
- Keysight 34465A DMM (dual-measurement export)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# Fields a column can populate on a measurement record
MEASUREMENT_FIELDS: Tuple[str, ...] = (
    "timestamp",
    "voltage",
    "current",
    "resistance",
    "power",
    "frequency",
    "phase_angle",
    "temperature",
    "humidity",
    "pass_fail",
    "notes",
)


class DataType(Enum):
    """Declared cell data types."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


@dataclass(frozen=True)
class ByName:
    """Column addressed by its header text."""
    name: str

    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class ByIndex:
    """Column addressed by 0-based position."""
    index: int

    def label(self) -> str:
        return f"Column {self.index}"


ColumnSource = Union[ByName, ByIndex]


@dataclass(frozen=True)
class ValidationRule:
    """Optional constraints applied after coercion."""
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    values: Optional[Tuple[Any, ...]] = None


@dataclass(frozen=True)
class ColumnMapping:
    """Mapping of one spreadsheet column onto a measurement field.

    ``source`` and ``data_type`` accept shorthand (a header string, an int
    index, or a data type name) and are normalized on construction.
    """
    source: ColumnSource
    target_field: str
    data_type: DataType = DataType.STRING
    required: bool = False
    validation: Optional[ValidationRule] = None

    def __post_init__(self):
        if isinstance(self.source, bool):
            raise ValueError(f"Invalid column source: {self.source!r}")
        if isinstance(self.source, int):
            object.__setattr__(self, "source", ByIndex(self.source))
        elif isinstance(self.source, str):
            object.__setattr__(self, "source", ByName(self.source))
        elif not isinstance(self.source, (ByName, ByIndex)):
            raise ValueError(f"Invalid column source: {self.source!r}")

        if not isinstance(self.data_type, DataType):
            object.__setattr__(self, "data_type", DataType(self.data_type))

        if self.target_field not in MEASUREMENT_FIELDS:
            raise ValueError(f"Unknown target field: {self.target_field}")

    @property
    def column_label(self) -> str:
        """Human-readable column reference used in error reports."""
        return self.source.label()


@dataclass(frozen=True)
class ExcelFormat:
    """Named, ordered column layout."""
    name: str
    columns: Tuple[ColumnMapping, ...] = field(default_factory=tuple)
    version: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def required_columns(self) -> List[ColumnMapping]:
        return [col for col in self.columns if col.required]

    def required_header_names(self) -> List[str]:
        """Normalized header names of required, name-addressed columns."""
        return [
            col.source.name.lower().strip()
            for col in self.required_columns
            if isinstance(col.source, ByName)
        ]

    def get_mapping(self, target_field: str) -> Optional[ColumnMapping]:
        for col in self.columns:
            if col.target_field == target_field:
                return col
        return None


# ============================================================================
# MEASUREMENT LIMITS
# ============================================================================

VOLTAGE_LIMITS = ValidationRule(min=0, max=10000)  # V
CURRENT_LIMITS = ValidationRule(min=0, max=5000)  # A
FREQUENCY_LIMITS = ValidationRule(min=0, max=1000)  # Hz
PHASE_ANGLE_LIMITS = ValidationRule(min=-360, max=360)  # degrees
TEMPERATURE_LIMITS = ValidationRule(min=-273.15, max=1000)  # °C
HUMIDITY_LIMITS = ValidationRule(min=0, max=100)  # %RH


# ============================================================================
# FORMAT REGISTRY - ordered, first match wins during detection
# ============================================================================

EXCEL_FORMATS: Dict[str, ExcelFormat] = {
    # -------------------------------------------------------------------------
    # Laboratory template exported by the test-session workbook
    # -------------------------------------------------------------------------
    "standard_v1": ExcelFormat(
        name="Standard Format V1",
        version="1.0",
        columns=(
            ColumnMapping("Timestamp", "timestamp", DataType.DATE, required=True),
            ColumnMapping("Voltage (V)", "voltage", DataType.NUMBER, required=True,
                          validation=VOLTAGE_LIMITS),
            ColumnMapping("Current (A)", "current", DataType.NUMBER, required=True,
                          validation=CURRENT_LIMITS),
            ColumnMapping("Resistance (Ω)", "resistance", DataType.NUMBER),
            ColumnMapping("Power (W)", "power", DataType.NUMBER),
            ColumnMapping("Temperature (°C)", "temperature", DataType.NUMBER,
                          validation=TEMPERATURE_LIMITS),
            ColumnMapping("Humidity (%)", "humidity", DataType.NUMBER,
                          validation=HUMIDITY_LIMITS),
            ColumnMapping("Pass/Fail", "pass_fail", DataType.BOOLEAN),
            ColumnMapping("Notes", "notes", DataType.STRING),
        ),
    ),

    # -------------------------------------------------------------------------
    # Fluke 1736 Power Logger - positional columns, no usable header names
    # -------------------------------------------------------------------------
    "fluke_1736": ExcelFormat(
        name="Fluke 1736 Power Logger",
        columns=(
            ColumnMapping(0, "timestamp", DataType.DATE, required=True),
            ColumnMapping(1, "voltage", DataType.NUMBER, required=True,
                          validation=VOLTAGE_LIMITS),
            ColumnMapping(2, "current", DataType.NUMBER, required=True,
                          validation=CURRENT_LIMITS),
            ColumnMapping(3, "power", DataType.NUMBER),
            ColumnMapping(4, "frequency", DataType.NUMBER, validation=FREQUENCY_LIMITS),
            ColumnMapping(5, "phase_angle", DataType.NUMBER, validation=PHASE_ANGLE_LIMITS),
        ),
    ),

    # -------------------------------------------------------------------------
    # Keysight 34465A DMM - primary/secondary measurement export
    # -------------------------------------------------------------------------
    "keysight_34465a": ExcelFormat(
        name="Keysight 34465A DMM",
        columns=(
            ColumnMapping("Time", "timestamp", DataType.DATE, required=True),
            ColumnMapping("Primary", "voltage", DataType.NUMBER, required=True,
                          validation=VOLTAGE_LIMITS),
            ColumnMapping("Secondary", "current", DataType.NUMBER, required=True,
                          validation=CURRENT_LIMITS),
            ColumnMapping("Calculated", "resistance", DataType.NUMBER),
        ),
    ),
}


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_format(identifier: str) -> Optional[ExcelFormat]:
    """Retrieve a format by registry key or display name.

    Args:
        identifier: Registry key (``"fluke_1736"``) or name (``"Fluke 1736 Power Logger"``)

    Returns:
        ExcelFormat or None if not found
    """
    identifier_lower = identifier.lower().strip()

    if identifier_lower in EXCEL_FORMATS:
        return EXCEL_FORMATS[identifier_lower]

    for fmt in EXCEL_FORMATS.values():
        if fmt.name.lower() == identifier_lower:
            return fmt

    return None


def list_all_formats() -> List[str]:
    """List registry keys in detection order."""
    return list(EXCEL_FORMATS.keys())


def is_valid_format(candidate: Any) -> bool:
    """Check that an object is a usable ExcelFormat."""
    return (
        isinstance(candidate, ExcelFormat)
        and len(candidate.columns) > 0
        and all(isinstance(col, ColumnMapping) for col in candidate.columns)
    )
