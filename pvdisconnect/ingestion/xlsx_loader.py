"""Loader for Excel files (.xlsx, .xls)."""

import io
import logging
from typing import Any, List, Optional

import pandas as pd

from .base_loader import BaseLoader, SheetNotFoundError, WorkbookReadError

logger = logging.getLogger(__name__)


class XlsxLoader(BaseLoader):
    """Load Excel workbooks exported by test instruments and data loggers.

    The reader engine is chosen by pandas from the file content
    (openpyxl for .xlsx, xlrd for legacy .xls).
    """

    def __init__(self, data: bytes, filename: Optional[str] = None):
        super().__init__(data, filename)
        self._workbook: Optional[pd.ExcelFile] = None

    def _open(self) -> pd.ExcelFile:
        if self._workbook is None:
            try:
                self._workbook = pd.ExcelFile(io.BytesIO(self.data))
            except Exception as e:
                raise WorkbookReadError(f"Unable to read workbook: {e}") from e
        return self._workbook

    def list_sheets(self) -> List[str]:
        """List all sheet names in Excel file."""
        return [str(name) for name in self._open().sheet_names]

    def load(self, sheet_name: Optional[str] = None) -> List[List[Any]]:
        """Load one sheet as raw rows."""
        sheets = self.list_sheets()
        if not sheets:
            raise WorkbookReadError("Workbook contains no sheets")

        target = sheet_name if sheet_name is not None else sheets[0]
        if target not in sheets:
            raise SheetNotFoundError(target, sheets)

        try:
            df = self._open().parse(target, header=None)
        except Exception as e:
            raise WorkbookReadError(f'Unable to read sheet "{target}": {e}') from e

        self.sheet_name = target
        self.rows = self.frame_to_rows(df)
        logger.debug("Read %d rows from sheet %s", len(self.rows), target)
        return self.rows
