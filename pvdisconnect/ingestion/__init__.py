"""Data Ingestion Module for PV Disconnect Test Data.

Imports measurement spreadsheets exported by test instruments and the
laboratory template.

File Formats:
- XLSX/XLS (Excel)
- CSV (comma/semicolon/tab separated)

Features:
- Format detection from the header row, with keyword-based fallback
- Per-cell coercion of dates, numbers, booleans and text
- Row validation with structured, row-numbered errors
- Batch rejection when the error rate is too high
- Export back to spreadsheet rows, xlsx and csv
"""

from .base_loader import BaseLoader, WorkbookReadError, SheetNotFoundError
from .auto_detector import AutoDetector, FileType, detect_format
from .csv_loader import CsvLoader
from .xlsx_loader import XlsxLoader
from .models import (
    ParseErrorKind,
    ParseError,
    MeasurementRecord,
    ProcessingOptions,
    RowResult,
    ExcelMetadata,
    ExcelParseResult,
)
from .validator import validate_row
from .ingest import (
    IngestionStatus,
    IngestionResult,
    UploadValidation,
    parse_excel_file,
    ingest,
    validate_upload,
)
from .export import (
    measurements_to_export_rows,
    write_rows_to_excel,
    write_rows_to_csv,
    export_session_workbook,
)

__all__ = [
    "BaseLoader",
    "WorkbookReadError",
    "SheetNotFoundError",
    "AutoDetector",
    "FileType",
    "detect_format",
    "CsvLoader",
    "XlsxLoader",
    "ParseErrorKind",
    "ParseError",
    "MeasurementRecord",
    "ProcessingOptions",
    "RowResult",
    "ExcelMetadata",
    "ExcelParseResult",
    "validate_row",
    "IngestionStatus",
    "IngestionResult",
    "UploadValidation",
    "parse_excel_file",
    "ingest",
    "validate_upload",
    "measurements_to_export_rows",
    "write_rows_to_excel",
    "write_rows_to_csv",
    "export_session_workbook",
]
