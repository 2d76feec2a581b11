"""Loader for CSV files (.csv)."""

import csv
import io
import logging
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

from .base_loader import BaseLoader, WorkbookReadError

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Sheet1"


class CsvLoader(BaseLoader):
    """Load delimited text exports as a single-sheet workbook.

    Cells are kept as text; typing happens during row validation.
    """

    def _decode(self) -> str:
        try:
            return self.data.decode("utf-8-sig")
        except UnicodeDecodeError:
            return self.data.decode("latin-1")

    def list_sheets(self) -> List[str]:
        if self.filename:
            return [Path(self.filename).stem or DEFAULT_SHEET_NAME]
        return [DEFAULT_SHEET_NAME]

    def load(self, sheet_name: Optional[str] = None) -> List[List[Any]]:
        """Load data from CSV content.

        ``sheet_name`` is accepted for interface compatibility and ignored.
        Leading blank lines are dropped, so the first non-blank line is row
        one of the sheet. Rows may have different field counts; short rows
        are padded with blanks.
        """
        text = self._decode()
        if not text.strip():
            self.rows = []
            return self.rows

        lines = text.splitlines()
        while lines and not lines[0].strip():
            lines.pop(0)
        text = "\n".join(lines)

        delimiter = self.detect_delimiter(lines[0])
        width = max(
            (len(fields) for fields in csv.reader(io.StringIO(text), delimiter=delimiter)),
            default=0,
        )

        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                header=None,
                names=range(width),
                dtype=object,
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise WorkbookReadError(f"Unable to read CSV data: {e}") from e

        self.sheet_name = self.list_sheets()[0]
        self.rows = self.frame_to_rows(df)
        logger.debug(
            "Read %d rows of up to %d fields from CSV (delimiter %r)",
            len(self.rows), width, delimiter
        )
        return self.rows
