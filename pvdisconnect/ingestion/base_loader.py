"""Base loader class for uploaded spreadsheet files."""

from abc import ABC, abstractmethod
from typing import List, Any, Optional
from pathlib import Path
import pandas as pd


class WorkbookReadError(ValueError):
    """Raised when an upload cannot be opened or read as a spreadsheet."""


class SheetNotFoundError(WorkbookReadError):
    """Raised when the requested sheet is not in the workbook."""

    def __init__(self, sheet_name: str, available: Optional[List[str]] = None):
        self.sheet_name = sheet_name
        self.available = available or []
        super().__init__(f'Sheet "{sheet_name}" not found')


class BaseLoader(ABC):
    """Abstract base class for in-memory spreadsheet loaders.

    Loaders return the raw cell grid of one sheet: a list of rows, each a
    list of cell values with blank cells as None. Headers are not split
    off here; row and header positions are the caller's concern.
    """

    def __init__(self, data: bytes, filename: Optional[str] = None):
        self.data = data
        self.filename = filename
        self.rows: Optional[List[List[Any]]] = None
        self.sheet_name: Optional[str] = None

    @abstractmethod
    def load(self, sheet_name: Optional[str] = None) -> List[List[Any]]:
        """Read one sheet into a list of rows.

        Args:
            sheet_name: Sheet to read (default: first sheet)

        Returns:
            List of rows, each a list of cell values

        Raises:
            WorkbookReadError: if the file cannot be read
            SheetNotFoundError: if ``sheet_name`` does not exist
        """
        pass

    @abstractmethod
    def list_sheets(self) -> List[str]:
        """List sheet names in file order."""
        pass

    def validate(self) -> bool:
        """Check that a sheet has been loaded and holds at least one row."""
        return bool(self.rows)

    def get_file_extension(self) -> str:
        """Get file extension."""
        if not self.filename:
            return ""
        return Path(self.filename).suffix.lower()

    @staticmethod
    def frame_to_rows(df: pd.DataFrame) -> List[List[Any]]:
        """Convert a header-less frame to row lists with None for blanks."""
        if df.empty:
            return []
        df = df.astype(object)
        return df.where(pd.notna(df), None).values.tolist()

    @staticmethod
    def detect_delimiter(first_line: str) -> str:
        """Detect delimiter in a line of delimited text."""
        # Check common delimiters
        delimiters = [',', '\t', ';', '|']
        delimiter_counts = {d: first_line.count(d) for d in delimiters}

        # Return delimiter with highest count
        return max(delimiter_counts, key=delimiter_counts.get)
