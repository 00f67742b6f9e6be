# dbdump/layouts/csv.py
"""
CSV layouts: standard CSV and the Excel flavour (UTF-16LE, BOM, ``sep=`` hint).
"""

import codecs
import csv
import io
import logging
from typing import Any, Optional, Sequence, TextIO

from .base import BaseRenderer
from ..defaults import settings
from ..utils import to_string

logger = logging.getLogger(__name__)


class CSVRenderer(BaseRenderer):
    """
    CSV renderer using the standard library csv module.

    Column names become the first line when the result set has any. Values
    are converted to text (binary decoded, dates formatted with the configured
    formats, NULL as ``settings['null_string_csv']``) before CSV quoting.

    Args:
        sink: Text stream to write to. Defaults to stdout
        null_string: String representation for null values
        **csv_kwargs: Additional arguments passed to csv.writer
    """

    def __init__(self, sink: Optional[TextIO] = None, null_string: Optional[str] = None, **csv_kwargs):
        super().__init__(sink)
        self.null_string = settings.get('null_string_csv', '') if null_string is None else null_string
        csv_kwargs.setdefault('lineterminator', settings.get('csv_lineterminator', '\n'))
        self._writer = csv.writer(self._stream(), **csv_kwargs)
        self._row = None

    def _stream(self):
        """Stream the csv writer writes to."""
        return self.sink

    def to_string(self, obj: Any) -> str:
        """Convert object to string for CSV output.
           Change settings['null_string_csv'] to change null value representation."""
        if obj is None:
            return self.null_string
        return to_string(obj)

    def _write_header(self, columns) -> None:
        if columns is None:
            return
        self._writer.writerow(columns)

    def _write_row(self, row: Sequence[Any]) -> None:
        # reuse one list for every row
        if self._row is None or len(self._row) != len(row):
            self._row = [None] * len(row)
        for i, value in enumerate(row):
            self._row[i] = self.to_string(value)
        self._writer.writerow(self._row)

    def _write_footer(self) -> None:
        self._stream().flush()


class CSVExcelRenderer(CSVRenderer):
    """
    CSV for spreadsheet applications.

    Output is UTF-16 little endian with a byte order mark, starts with a
    ``sep=;`` line telling the reader which separator is used, and separates
    fields with ``;`` (``settings['excel_separator']``).

    The sink may be a binary stream or a text stream with a ``buffer``
    attribute (like ``sys.stdout``); the UTF-16 bytes go to the binary layer.
    Any other text sink (e.g. ``io.StringIO``) raises TypeError.
    """

    def __init__(self, sink: Optional[TextIO] = None, null_string: Optional[str] = None, **csv_kwargs):
        self.separator = csv_kwargs.pop('delimiter', settings.get('excel_separator', ';'))
        self._encoder = None
        super().__init__(sink, null_string, delimiter=self.separator, **csv_kwargs)

    def _stream(self):
        if self._encoder is None:
            binary = getattr(self.sink, 'buffer', self.sink)
            if isinstance(binary, io.TextIOBase):
                raise TypeError(f"{type(self).__name__} writes UTF-16 bytes and needs a binary sink "
                                f"or a text sink with a .buffer, got {type(self.sink).__name__}")
            if binary is not self.sink:
                # anything already written as text must land before the BOM
                self.sink.flush()
            self._encoder = codecs.getwriter('utf-16-le')(binary)
        return self._encoder

    def _write_header(self, columns) -> None:
        stream = self._stream()
        stream.write('\ufeff')
        stream.write(f'sep={self.separator}\n')
        super()._write_header(columns)
