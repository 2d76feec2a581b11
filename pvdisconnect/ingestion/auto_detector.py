"""Auto-detect spreadsheet file type and column layout."""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from config.instrument_formats import (
    EXCEL_FORMATS,
    ByIndex,
    ByName,
    ColumnMapping,
    DataType,
    ExcelFormat,
    CURRENT_LIMITS,
    FREQUENCY_LIMITS,
    HUMIDITY_LIMITS,
    PHASE_ANGLE_LIMITS,
    TEMPERATURE_LIMITS,
    VOLTAGE_LIMITS,
)

from .base_loader import BaseLoader
from .csv_loader import CsvLoader
from .xlsx_loader import XlsxLoader

logger = logging.getLogger(__name__)

GENERIC_FORMAT_NAME = "Generic (inferred columns)"


class FileType(Enum):
    """Spreadsheet container types accepted for upload."""
    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


ZIP_MAGIC = b"PK\x03\x04"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

CSV_MEDIA_TYPES = ("text/csv", "application/csv", "text/plain")


def normalize_header(header) -> str:
    if header is None:
        return ""
    return str(header).lower().strip()


def find_header_index(headers: Sequence, name: str) -> Optional[int]:
    """Locate a named column: exact (normalized) match first, then substring."""
    target = normalize_header(name)
    normalized = [normalize_header(h) for h in headers]

    for idx, header in enumerate(normalized):
        if header == target:
            return idx

    for idx, header in enumerate(normalized):
        if target and target in header:
            return idx

    return None


def _tokens(header: str) -> List[str]:
    return [tok for tok in re.split(r"[^a-z0-9%°]+", header) if tok]


# Per-field (substring keywords, whole-token keywords), in assignment order.
# Substrings are tried across all headers before falling back to tokens.
FIELD_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...], Tuple[str, ...]], ...] = (
    ("timestamp", ("timestamp", "time", "date"), ()),
    ("voltage", ("volt",), ("v", "u", "vdc", "vac")),
    ("current", ("current", "amp"), ("i", "a", "idc", "iac")),
    ("resistance", ("resist", "ohm", "ω"), ("r",)),
    ("power", ("power", "watt"), ("p", "w")),
    ("frequency", ("freq",), ("hz", "f")),
    ("phase_angle", ("phase",), ("φ",)),
    ("temperature", ("temp",), ("t", "°c")),
    ("humidity", ("humid",), ("rh",)),
    ("pass_fail", ("pass", "fail", "verdict", "result"), ()),
    ("notes", ("note", "comment", "remark"), ()),
)

FIELD_TYPES: Dict[str, DataType] = {
    "timestamp": DataType.DATE,
    "pass_fail": DataType.BOOLEAN,
    "notes": DataType.STRING,
}

FIELD_LIMITS = {
    "voltage": VOLTAGE_LIMITS,
    "current": CURRENT_LIMITS,
    "frequency": FREQUENCY_LIMITS,
    "phase_angle": PHASE_ANGLE_LIMITS,
    "temperature": TEMPERATURE_LIMITS,
    "humidity": HUMIDITY_LIMITS,
}


class AutoDetector:
    """Detect file type and column layout of uploaded spreadsheets."""

    @classmethod
    def detect_file_type(
        cls,
        data: bytes,
        filename: Optional[str] = None,
        media_type: Optional[str] = None
    ) -> FileType:
        """Sniff the container type from magic bytes, media type and extension."""
        if data.startswith(ZIP_MAGIC):
            return FileType.XLSX
        if data.startswith(OLE2_MAGIC):
            return FileType.XLS

        ext = Path(filename).suffix.lower() if filename else ""
        if ext == ".csv" or (media_type or "").lower() in CSV_MEDIA_TYPES:
            return FileType.CSV
        if ext == ".xls" or media_type == "application/vnd.ms-excel":
            return FileType.XLS
        return FileType.XLSX

    @classmethod
    def get_loader(
        cls,
        data: bytes,
        filename: Optional[str] = None,
        media_type: Optional[str] = None
    ) -> BaseLoader:
        """Select the loader matching the sniffed file type."""
        file_type = cls.detect_file_type(data, filename, media_type)
        logger.debug("Detected file type %s for %s", file_type.value, filename or "<upload>")

        if file_type is FileType.CSV:
            return CsvLoader(data, filename)
        return XlsxLoader(data, filename)

    @classmethod
    def detect_format(
        cls,
        headers: Sequence,
        formats: Optional[Dict[str, ExcelFormat]] = None
    ) -> Optional[ExcelFormat]:
        """Select the first registered format whose required headers are present.

        Matching is by substring against normalized headers. Formats with no
        name-addressed required column cannot be recognised from headers and
        are only used when requested explicitly. When nothing matches, a
        generic format is inferred from voltage/current/time keywords.

        Args:
            headers: Header row cells
            formats: Ordered registry (default EXCEL_FORMATS)

        Returns:
            ExcelFormat or None if no format detected
        """
        if formats is None:
            formats = EXCEL_FORMATS

        normalized = [normalize_header(h) for h in headers]

        for key, fmt in formats.items():
            required = fmt.required_header_names()
            if not required:
                continue
            if all(any(name in header for header in normalized) for name in required):
                logger.info("Detected format %s (%s)", key, fmt.name)
                return fmt

        inferred = cls.infer_format(headers)
        if inferred is not None:
            logger.info("No registered format matched; inferred generic column layout")
        return inferred

    @classmethod
    def infer_columns(cls, headers: Sequence) -> Dict[str, int]:
        """Assign header indices to measurement fields by keyword.

        Each header is used for at most one field.
        """
        normalized = [normalize_header(h) for h in headers]
        assigned: Dict[str, int] = {}
        used = set()

        for field_name, substrings, tokens in FIELD_KEYWORDS:
            match = None
            for idx, header in enumerate(normalized):
                if idx not in used and any(kw in header for kw in substrings):
                    match = idx
                    break
            if match is None and tokens:
                for idx, header in enumerate(normalized):
                    if idx not in used and any(tok in tokens for tok in _tokens(header)):
                        match = idx
                        break
            if match is not None:
                assigned[field_name] = match
                used.add(match)

        return assigned

    @classmethod
    def infer_format(cls, headers: Sequence) -> Optional[ExcelFormat]:
        """Build a generic format when voltage, current and time columns are found."""
        assigned = cls.infer_columns(headers)
        if not all(f in assigned for f in ("timestamp", "voltage", "current")):
            return None

        header_texts = [str(h).strip() if h is not None else "" for h in headers]
        columns = []
        for field_name, _, _ in FIELD_KEYWORDS:
            if field_name not in assigned:
                continue
            idx = assigned[field_name]
            text = header_texts[idx]
            if text and header_texts.count(text) == 1:
                source = ByName(text)
            else:
                source = ByIndex(idx)
            columns.append(ColumnMapping(
                source,
                field_name,
                FIELD_TYPES.get(field_name, DataType.NUMBER),
                required=(field_name == "timestamp"),
                validation=FIELD_LIMITS.get(field_name),
            ))

        return ExcelFormat(name=GENERIC_FORMAT_NAME, columns=tuple(columns))


def detect_format(
    headers: Sequence,
    formats: Optional[Dict[str, ExcelFormat]] = None
) -> Optional[ExcelFormat]:
    """Module-level shortcut for AutoDetector.detect_format."""
    return AutoDetector.detect_format(headers, formats)
