# dbdump/exceptions.py
"""
Errors raised while streaming a result set.

Every error is fatal to the run: the driver stops, releases the cursor and
re-raises. Output already written to the sink is not retracted, so a late
failure can leave an incomplete document (e.g. a JSON array without its
closing bracket).
"""

from typing import Optional


class DumpError(Exception):
    """Base class for all dbdump errors."""


class ScanError(DumpError):
    """A column value could not be read into its scan target."""

    def __init__(self, message: str, column: Optional[str] = None, row_num: Optional[int] = None):
        self.reason = message
        self.column = column
        self.row_num = row_num
        if column is not None and row_num is not None:
            message = f"Scan row {row_num}, column '{column}': {message}"
        elif column is not None:
            message = f"Scan column '{column}': {message}"
        elif row_num is not None:
            message = f"Scan row {row_num}: {message}"
        super().__init__(message)


class EncodeError(DumpError):
    """A renderer could not serialize a value."""


class SinkError(DumpError):
    """Writing to the output sink failed."""


class CursorError(DumpError):
    """The cursor failed while advancing, describing or closing."""


class QueryCancelled(CursorError):
    """The run was cancelled before the cursor was advanced again."""
