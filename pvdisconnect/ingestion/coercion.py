"""Cell value coercion for spreadsheet imports.

Each parser is total: any input yields a typed value or None, never an
exception. Whether None is acceptable is decided by the caller (required
columns treat it as missing).
"""

import math
import numbers
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import numpy as np
import pandas as pd

from config.instrument_formats import DataType

from .models import ProcessingOptions

# Spreadsheet serial dates count days from 1899-12-30; this epoch absorbs
# the 1900 leap-year bug for every serial after 60 (1900-02-28).
EXCEL_EPOCH = datetime(1899, 12, 30)
SECONDS_PER_DAY = 86400

DATE_PATTERNS = (
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "%m/%d/%Y"),
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), "%m-%d-%Y"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),
)

TRUE_STRINGS = frozenset({"true", "yes", "y", "1", "pass", "passed"})
FALSE_STRINGS = frozenset({"false", "no", "n", "0", "fail", "failed"})

_NUMBER_PREFIX = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_NON_NUMERIC = re.compile(r"[^\d.\-]")


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not _is_bool(value)


def is_blank(value: Any) -> bool:
    """None, NaN/NaT, or an empty/whitespace-only string."""
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if _is_real(value):
        return math.isnan(value)
    return False


def excel_serial_to_datetime(serial: Any) -> Optional[datetime]:
    """Convert a spreadsheet serial day count to a datetime.

    Example: 44562 -> 2022-01-01 00:00:00
    """
    if not _is_real(serial) or not math.isfinite(serial):
        return None
    try:
        milliseconds = round(float(serial) * SECONDS_PER_DAY * 1000)
        return EXCEL_EPOCH + timedelta(milliseconds=milliseconds)
    except OverflowError:
        return None


def parse_date(value: Any) -> Optional[datetime]:
    """Coerce a cell to a datetime.

    Accepts native dates, spreadsheet serial numbers, ISO-8601 strings and
    the patterns YYYY-MM-DD, MM/DD/YYYY, MM-DD-YYYY, YYYY/MM/DD.
    """
    if is_blank(value) or _is_bool(value):
        return None

    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime.combine(value, time())

    if _is_real(value):
        return excel_serial_to_datetime(value)

    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass

        for pattern, fmt in DATE_PATTERNS:
            if pattern.match(text):
                try:
                    return datetime.strptime(text, fmt)
                except ValueError:
                    return None

    return None


def parse_number(
    value: Any,
    decimal_separator: str = ".",
    thousand_separator: str = ""
) -> Optional[float]:
    """Coerce a cell to a finite float.

    Strings may use locale separators; with ``decimal_separator=","`` dots
    are treated as grouping and the first comma becomes the decimal point.
    Unit suffixes and other stray characters are stripped.
    """
    if is_blank(value) or _is_bool(value):
        return None

    if _is_real(value):
        number = float(value)
        return number if math.isfinite(number) else None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if decimal_separator == ",":
        text = text.replace(".", "").replace(",", ".", 1)
    elif thousand_separator:
        text = text.replace(thousand_separator, "")

    # Plain and scientific notation first ("1.5E-03")
    try:
        number = float(text)
        if math.isfinite(number):
            return number
    except ValueError:
        pass

    match = _NUMBER_PREFIX.match(_NON_NUMERIC.sub("", text))
    if not match:
        return None
    return float(match.group())


def parse_boolean(value: Any) -> Optional[bool]:
    """Coerce a cell to True/False from booleans, numbers or pass/fail words."""
    if value is None:
        return None

    if _is_bool(value):
        return bool(value)

    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        return None

    if _is_real(value):
        if math.isnan(value):
            return None
        return value != 0

    return None


def parse_string(value: Any, trim: bool = True) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text.strip() if trim else text


def coerce_value(
    value: Any,
    data_type: DataType,
    options: Optional[ProcessingOptions] = None
) -> Any:
    """Dispatch to the parser for ``data_type``."""
    options = options or ProcessingOptions()

    if data_type is DataType.DATE:
        return parse_date(value)
    if data_type is DataType.NUMBER:
        return parse_number(
            value,
            decimal_separator=options.decimal_separator,
            thousand_separator=options.thousand_separator,
        )
    if data_type is DataType.BOOLEAN:
        return parse_boolean(value)
    return parse_string(value, trim=options.trim_values)
