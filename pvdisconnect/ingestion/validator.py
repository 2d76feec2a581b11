"""Row validation: apply a format's column mappings to one raw row."""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from config.instrument_formats import (
    ByIndex,
    ColumnMapping,
    ColumnSource,
    DataType,
    ExcelFormat,
)

from .auto_detector import find_header_index
from .coercion import coerce_value, is_blank
from .models import (
    MeasurementRecord,
    ParseError,
    ParseErrorKind,
    ProcessingOptions,
    RowResult,
)

logger = logging.getLogger(__name__)

INCOMPLETE_ROW_MESSAGE = "Row must have a timestamp and at least one of voltage or current"


def get_cell(row: Sequence[Any], source: ColumnSource, headers: Optional[Sequence] = None) -> Any:
    """Return the cell addressed by ``source``, or None when absent."""
    if isinstance(source, ByIndex):
        index = source.index
    else:
        if headers is None:
            return None
        index = find_header_index(headers, source.name)
        if index is None:
            return None

    if index < 0 or index >= len(row):
        return None
    return row[index]


def raw_row_mapping(row: Sequence[Any], headers: Optional[Sequence] = None) -> Dict[str, Any]:
    """Key raw cells by header text, falling back to ``Column {i}``."""
    mapping = {}
    for idx, value in enumerate(row):
        header = None
        if headers is not None and idx < len(headers) and not is_blank(headers[idx]):
            header = str(headers[idx]).strip()
        key = header if header and header not in mapping else f"Column {idx}"
        mapping[key] = value
    return mapping


def check_rule(mapping: ColumnMapping, value: Any, row_number: int) -> Optional[ParseError]:
    """Apply the mapping's validation rule to a coerced value."""
    rule = mapping.validation
    if rule is None:
        return None

    label = mapping.column_label

    if mapping.data_type is DataType.NUMBER:
        if rule.min is not None and value < rule.min:
            return ParseError(
                row=row_number,
                column=label,
                value=value,
                message=f"Value {value} is below minimum {rule.min}",
                kind=ParseErrorKind.RANGE,
            )
        if rule.max is not None and value > rule.max:
            return ParseError(
                row=row_number,
                column=label,
                value=value,
                message=f"Value {value} is above maximum {rule.max}",
                kind=ParseErrorKind.RANGE,
            )

    if rule.pattern is not None and isinstance(value, str):
        if not re.search(rule.pattern, value):
            return ParseError(
                row=row_number,
                column=label,
                value=value,
                message=f"Value '{value}' does not match required format",
                kind=ParseErrorKind.FORMAT,
            )

    if rule.values is not None and value not in rule.values:
        return ParseError(
            row=row_number,
            column=label,
            value=value,
            message=f"Value '{value}' is not one of the allowed values",
            kind=ParseErrorKind.VALIDATION,
        )

    return None


def validate_row(
    raw_row: Sequence[Any],
    fmt: ExcelFormat,
    row_number: int,
    headers: Optional[Sequence] = None,
    options: Optional[ProcessingOptions] = None
) -> RowResult:
    """Validate one data row against a format.

    Blank optional cells, and optional cells that fail to coerce, are left
    unset. A blank or uncoercible required cell is a ``missing`` error.

    Args:
        raw_row: Cell values of the row
        fmt: Column layout to apply
        row_number: 1-based spreadsheet row, used in error reports
        headers: Header row, needed for name-addressed columns
        options: Coercion and derivation options

    Returns:
        RowResult with a record when accepted, otherwise the row's errors
    """
    options = options or ProcessingOptions()
    errors: List[ParseError] = []
    values: Dict[str, Any] = {}

    for mapping in fmt.columns:
        label = mapping.column_label
        cell = get_cell(raw_row, mapping.source, headers)

        if is_blank(cell):
            if mapping.required:
                errors.append(ParseError(
                    row=row_number,
                    column=label,
                    value=cell,
                    message=f"Required field '{label}' is missing",
                    kind=ParseErrorKind.MISSING,
                ))
            continue

        value = coerce_value(cell, mapping.data_type, options)
        if value is None:
            if mapping.required:
                errors.append(ParseError(
                    row=row_number,
                    column=label,
                    value=cell,
                    message=f"Required field '{label}' has no valid {mapping.data_type.value} value",
                    kind=ParseErrorKind.MISSING,
                ))
            continue

        rule_error = check_rule(mapping, value, row_number)
        if rule_error is not None:
            errors.append(rule_error)
            continue

        values[mapping.target_field] = value

    record = MeasurementRecord(
        source_row=row_number,
        raw_source=raw_row_mapping(raw_row, headers),
        **values
    )

    if not errors and not record.is_complete():
        errors.append(ParseError(
            row=row_number,
            message=INCOMPLETE_ROW_MESSAGE,
            kind=ParseErrorKind.MISSING,
        ))

    if errors:
        for error in errors:
            logger.debug("Row %d rejected: %s", row_number, error.message)
        return RowResult(record=None, errors=errors)

    if options.derive_electrical:
        record.derive_electrical()

    return RowResult(record=record)
