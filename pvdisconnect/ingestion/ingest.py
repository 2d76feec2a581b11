"""Ingestion of uploaded measurement spreadsheets.

Reads an uploaded workbook (xlsx, xls or csv bytes), detects or resolves
its column format, validates each data row and aggregates the accepted
measurement records and per-row errors. ``ingest`` adds the batch policy:
an upload whose error count exceeds the configured fraction of rows seen
is rejected as a whole.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from config.config import INGESTION_CONFIG, UPLOAD_CONFIG
from config.instrument_formats import ExcelFormat, get_format

from ..analysis.session_stats import SessionStatistics, compute_session_statistics
from .auto_detector import AutoDetector
from .base_loader import WorkbookReadError
from .coercion import is_blank
from .models import (
    ExcelMetadata,
    ExcelParseResult,
    MeasurementRecord,
    ParseError,
    ParseErrorKind,
    ProcessingOptions,
)
from .validator import validate_row

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "upload"
NO_FORMAT_MESSAGE = "Unable to detect Excel format. Please specify format explicitly."


class IngestionStatus(Enum):
    """Outcome of an ingestion batch."""
    SUCCESS = "success"
    FORMAT_ERROR = "format_error"
    TOO_MANY_ERRORS = "too_many_errors"
    NO_VALID_DATA = "no_valid_data"


@dataclass
class IngestionResult:
    """Accepted records, errors and summary of one upload.

    ``accepted`` is empty unless ``status`` is SUCCESS.
    """
    status: IngestionStatus
    session_id: Any
    accepted: List[MeasurementRecord] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)
    summary: Optional[SessionStatistics] = None
    metadata: Optional[ExcelMetadata] = None

    @property
    def success(self) -> bool:
        return self.status is IngestionStatus.SUCCESS

    @property
    def error_preview(self) -> List[ParseError]:
        """First errors to show: warnings on success, diagnosis on rejection."""
        if self.success:
            limit = INGESTION_CONFIG["warning_error_preview"]
        else:
            limit = INGESTION_CONFIG["rejection_error_preview"]
        return self.errors[:limit]


@dataclass
class UploadValidation:
    """Result of pre-validating an upload before a full import."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    preview: List[MeasurementRecord] = field(default_factory=list)


def _fatal(message: str) -> ExcelParseResult:
    logger.warning("Upload rejected: %s", message)
    return ExcelParseResult(
        success=False,
        errors=[ParseError(row=0, message=message, kind=ParseErrorKind.FORMAT)],
    )


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(is_blank(cell) for cell in row)


def _resolve_format(
    requested,
    headers: Sequence,
    formats: Optional[Dict[str, ExcelFormat]]
) -> Optional[ExcelFormat]:
    if isinstance(requested, ExcelFormat):
        return requested
    if requested is not None:
        if formats is not None and requested in formats:
            return formats[requested]
        return get_format(requested)
    return AutoDetector.detect_format(headers, formats)


def parse_excel_file(
    data: bytes,
    options: Optional[ProcessingOptions] = None,
    filename: Optional[str] = None,
    media_type: Optional[str] = None,
    formats: Optional[Dict[str, ExcelFormat]] = None
) -> ExcelParseResult:
    """Parse an uploaded spreadsheet into measurement records.

    File-level failures (unreadable bytes, missing sheet, empty sheet, no
    usable format) return ``success=False`` with a single ``format`` error
    and no data. Otherwise every processed row yields either a record or
    its errors; ``success`` is True when at least one row was accepted.

    Args:
        data: Raw file content
        options: Processing options (sheet, header row, format, ...)
        filename: Original file name, used for type sniffing and metadata
        media_type: Declared media type of the upload
        formats: Format registry to detect from (default EXCEL_FORMATS)

    Returns:
        ExcelParseResult
    """
    options = options or ProcessingOptions()
    filename = filename or DEFAULT_FILENAME

    loader = AutoDetector.get_loader(data, filename, media_type)
    try:
        rows = loader.load(options.sheet_name)
    except WorkbookReadError as e:
        return _fatal(str(e))

    if not rows or all(_is_blank_row(row) for row in rows):
        return _fatal("No data found in sheet")

    if options.header_row >= len(rows):
        return _fatal(f"Header row {options.header_row + 1} is beyond the end of the sheet")

    headers = ["" if is_blank(h) else str(h).strip() for h in rows[options.header_row]]

    fmt = _resolve_format(options.format, headers, formats)
    if fmt is None:
        if options.format is not None:
            return _fatal(f"Unknown format: {options.format}")
        return _fatal(NO_FORMAT_MESSAGE)

    records: List[MeasurementRecord] = []
    errors: List[ParseError] = []
    rows_seen = 0

    for idx in range(options.first_data_row, len(rows)):
        if options.max_rows is not None and rows_seen >= options.max_rows:
            break

        row = rows[idx]
        if options.skip_empty_rows and _is_blank_row(row):
            continue

        rows_seen += 1
        result = validate_row(row, fmt, idx + 1, headers, options)
        if result.accepted:
            result.record.sequence_number = len(records) + 1
            records.append(result.record)
        else:
            errors.extend(result.errors)

    metadata = ExcelMetadata(
        filename=filename,
        file_size=len(data),
        total_rows=rows_seen,
        valid_rows=len(records),
        invalid_rows=rows_seen - len(records),
        headers=headers,
        detected_format=fmt,
        sheet_name=loader.sheet_name,
        error_count=len(errors),
        sheet_rows=max(len(rows) - options.first_data_row, 0),
    )

    logger.info(
        "Parsed %s with format %s: %d rows, %d accepted, %d errors",
        filename, fmt.name, rows_seen, len(records), len(errors)
    )

    return ExcelParseResult(
        success=len(records) > 0,
        data=records,
        metadata=metadata,
        errors=errors,
    )


def ingest(
    data: bytes,
    session_id: Any,
    options: Optional[ProcessingOptions] = None,
    filename: Optional[str] = None,
    media_type: Optional[str] = None,
    formats: Optional[Dict[str, ExcelFormat]] = None
) -> IngestionResult:
    """Import an uploaded spreadsheet for a test session.

    The batch is rejected as a whole (TOO_MANY_ERRORS, no accepted records)
    when the error count exceeds ``error_rate_threshold`` times the number
    of rows processed. Summary statistics are computed only on success.

    Args:
        data: Raw file content
        session_id: Test session the measurements belong to
        options: Processing options
        filename: Original file name
        media_type: Declared media type

    Returns:
        IngestionResult
    """
    options = options or ProcessingOptions()
    threshold = options.error_rate_threshold
    if threshold is None:
        threshold = INGESTION_CONFIG["error_rate_threshold"]

    parsed = parse_excel_file(data, options, filename, media_type, formats)

    if parsed.metadata is None:
        return IngestionResult(
            status=IngestionStatus.FORMAT_ERROR,
            session_id=session_id,
            errors=parsed.errors,
        )

    rows_seen = parsed.metadata.total_rows
    if len(parsed.errors) > threshold * rows_seen:
        logger.warning(
            "Session %s: rejected upload with %d errors in %d rows",
            session_id, len(parsed.errors), rows_seen
        )
        return IngestionResult(
            status=IngestionStatus.TOO_MANY_ERRORS,
            session_id=session_id,
            errors=parsed.errors,
            metadata=parsed.metadata,
        )

    if not parsed.data:
        logger.warning("Session %s: no valid measurement data in upload", session_id)
        return IngestionResult(
            status=IngestionStatus.NO_VALID_DATA,
            session_id=session_id,
            errors=parsed.errors,
            metadata=parsed.metadata,
        )

    summary = compute_session_statistics(parsed.data)
    logger.info(
        "Session %s: imported %d measurements (%d row errors)",
        session_id, len(parsed.data), len(parsed.errors)
    )

    return IngestionResult(
        status=IngestionStatus.SUCCESS,
        session_id=session_id,
        accepted=parsed.data,
        errors=parsed.errors,
        summary=summary,
        metadata=parsed.metadata,
    )


def validate_upload(
    data: bytes,
    filename: Optional[str] = None,
    media_type: Optional[str] = None,
    options: Optional[ProcessingOptions] = None
) -> UploadValidation:
    """Check size and type of an upload and parse a short preview.

    Args:
        data: Raw file content
        filename: Original file name
        media_type: Declared media type

    Returns:
        UploadValidation with the first preview rows when valid
    """
    errors = []

    max_mb = UPLOAD_CONFIG["max_file_size_mb"]
    size_mb = len(data) / 1024 / 1024
    if size_mb > max_mb:
        errors.append(
            f"File size ({size_mb:.2f}MB) exceeds maximum allowed size ({max_mb:g}MB)"
        )

    ext = Path(filename).suffix.lower() if filename else ""
    if (
        media_type not in UPLOAD_CONFIG["allowed_media_types"]
        and ext not in UPLOAD_CONFIG["allowed_extensions"]
    ):
        errors.append("Invalid file type. Please upload an Excel or CSV file (.xlsx, .xls or .csv)")

    if errors:
        return UploadValidation(is_valid=False, errors=errors)

    options = options or ProcessingOptions()
    preview_options = replace(options, max_rows=INGESTION_CONFIG["upload_preview_rows"])

    result = parse_excel_file(data, preview_options, filename, media_type)
    if not result.success:
        messages = [e.message for e in result.errors] or ["Failed to parse file"]
        return UploadValidation(is_valid=False, errors=messages)

    return UploadValidation(is_valid=True, preview=result.data)
