# dbdump/layouts/base.py
"""
Base class for output layouts with the header/row/footer contract.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, TextIO

from ..exceptions import DumpError, EncodeError, SinkError
from ..utils import BINARY_TYPES, decode_binary

logger = logging.getLogger(__name__)


class BaseRenderer(ABC):
    """
    Abstract base class for all output layouts in dbdump.

    A renderer turns a stream of generic rows into one output format. It never
    sees the cursor or the column types, only the column names (once) and the
    row values (once per row). The three public operations must be called in
    this order, exactly once for header and footer:

    1. ``write_header(columns)`` - ``columns`` is None for an empty result set
    2. ``write_row(row)`` - zero or more times
    3. ``write_footer()``

    Calling them out of order raises RuntimeError. Subclasses implement the
    format-specific ``_write_header``, ``_write_row`` and ``_write_footer``;
    the public wrappers enforce the call order and translate failures:

    * ``OSError`` from the sink becomes :class:`~dbdump.exceptions.SinkError`
    * ``TypeError``/``ValueError`` from an encoder becomes
      :class:`~dbdump.exceptions.EncodeError`

    Parameters
    ----------
    sink : TextIO, optional
        Text stream to write to. Defaults to ``sys.stdout``.

    Attributes
    ----------
    columns : List[str] or None
        Column names passed to write_header
    row_count : int
        Number of rows written so far

    Notes
    -----
    Output is streamed. If a row fails half way through a document, whatever
    was already written stays in the sink and the document is left unclosed.
    """

    #: Layout token under which the class is registered, set by register_layout
    name = None

    def __init__(self, sink: Optional[TextIO] = None):
        self.sink = sys.stdout if sink is None else sink
        self.columns = None
        self._row_num = 0
        self._header_written = False
        self._footer_written = False

    @property
    def row_count(self) -> int:
        """Returns the number of rows written."""
        return self._row_num

    def write_header(self, columns: Optional[Sequence[str]]) -> None:
        """Start the output. columns is None when the result set is empty."""
        if self._header_written:
            raise RuntimeError(f"{type(self).__name__}: header already written")
        self.columns = list(columns) if columns is not None else None
        self._call(self._write_header, self.columns)
        self._header_written = True

    def write_row(self, row: Sequence[Any]) -> None:
        """Write one row of generic values."""
        if not self._header_written:
            raise RuntimeError(f"{type(self).__name__}: row written before header")
        if self._footer_written:
            raise RuntimeError(f"{type(self).__name__}: row written after footer")
        self._call(self._write_row, row)
        self._row_num += 1

    def write_footer(self) -> None:
        """Close the output and flush the sink."""
        if not self._header_written:
            raise RuntimeError(f"{type(self).__name__}: footer written before header")
        if self._footer_written:
            raise RuntimeError(f"{type(self).__name__}: footer already written")
        self._call(self._write_footer)
        self._footer_written = True

    def _call(self, method, *args) -> None:
        try:
            method(*args)
        except DumpError:
            raise
        except OSError as e:
            raise SinkError(f"{self.name or type(self).__name__}: {e}") from e
        except (TypeError, ValueError) as e:
            raise EncodeError(f"{self.name or type(self).__name__}: {e}") from e

    def _write_header(self, columns: Optional[List[str]]) -> None:
        pass

    @abstractmethod
    def _write_row(self, row: Sequence[Any]) -> None:
        pass

    def _write_footer(self) -> None:
        self.sink.flush()


def text_value(value: Any) -> Any:
    """Binary values become text before they reach any encoder."""
    if isinstance(value, BINARY_TYPES):
        return decode_binary(value)
    return value
