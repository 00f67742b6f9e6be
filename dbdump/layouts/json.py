# dbdump/layouts/json.py
"""
JSON layouts for query results.

All JSON output is compact (no spaces after separators), keeps non-ASCII
text as is and does not escape HTML characters. Rows are written as they
arrive; documents are framed by hand so nothing is held in memory.
"""

import datetime as dt
import json
import logging
from decimal import Decimal
from typing import Any, List, Optional, Sequence, TextIO

from .base import BaseRenderer, text_value
from ..utils import BINARY_TYPES, decode_binary, format_interval

logger = logging.getLogger(__name__)


class RowEncoder(json.JSONEncoder):
    """
    JSON encoder for generic row values.

    Dates and times become ISO 8601 strings and Decimals become strings so no
    precision is lost. NaN and infinities are rejected since they are not
    valid JSON. Anything else unknown raises TypeError.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault('ensure_ascii', False)
        kwargs.setdefault('allow_nan', False)
        kwargs.setdefault('separators', (',', ':'))
        super().__init__(**kwargs)

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (dt.datetime, dt.date, dt.time)):
            return obj.isoformat()
        if isinstance(obj, dt.timedelta):
            return format_interval(obj)
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, BINARY_TYPES):
            return decode_binary(obj)
        return super().default(obj)


class JSONLinesRenderer(BaseRenderer):
    """
    JSON Lines: one JSON array per line, the first line holds the column names.

    Example output::

        ["id","name"]
        [1,"Aang"]
        [2,"Katara"]
    """

    def __init__(self, sink: Optional[TextIO] = None, **json_kwargs):
        super().__init__(sink)
        self.encoder = RowEncoder(**json_kwargs)

    def _write_header(self, columns: Optional[List[str]]) -> None:
        if columns is not None:
            self.sink.write(self.encoder.encode(columns) + '\n')

    def _write_row(self, row: Sequence[Any]) -> None:
        self.sink.write(self.encoder.encode([text_value(v) for v in row]) + '\n')


class JSONArrayRenderer(BaseRenderer):
    """
    A single JSON array whose elements are the rows, each row an array.

    Each row sits on its own line, the first prefixed with a space and the
    others with a comma::

        [
         [1,"Aang"]
        ,[2,"Katara"]
        ]
    """

    def __init__(self, sink: Optional[TextIO] = None, **json_kwargs):
        super().__init__(sink)
        self.encoder = RowEncoder(**json_kwargs)
        self.first = True

    def _write_header(self, columns: Optional[List[str]]) -> None:
        self.sink.write('[\n')

    def _write_element(self, value: Any) -> None:
        data = self.encoder.encode(value)
        self.sink.write((' ' if self.first else ',') + data + '\n')
        self.first = False

    def _write_row(self, row: Sequence[Any]) -> None:
        self._write_element([text_value(v) for v in row])

    def _write_footer(self) -> None:
        self.sink.write(']\n')
        self.sink.flush()


class JSONArrayHeaderRenderer(JSONArrayRenderer):
    """
    Same as JSONArrayRenderer, with the column names as the first element.

    The header goes through the same RowEncoder as the rows, so column names
    keep non-ASCII characters and ``<``, ``>``, ``&`` unescaped, like every
    other JSON layout here.
    """

    def _write_header(self, columns: Optional[List[str]]) -> None:
        super()._write_header(columns)
        if columns is not None:
            self._write_element(columns)


class JSONObjectRenderer(BaseRenderer):
    """
    A single JSON array of objects keyed by column name.

    The ``"name":`` fragments are encoded once in the header and reused for
    every row::

        [
         {"id":1,"name":"Aang"}
        ,{"id":2,"name":"Katara"}
        ]
    """

    def __init__(self, sink: Optional[TextIO] = None, **json_kwargs):
        super().__init__(sink)
        self.encoder = RowEncoder(**json_kwargs)
        self.first = True
        self.keys = None

    def _write_header(self, columns: Optional[List[str]]) -> None:
        if columns:
            self.keys = [(',' if i else '') + self.encoder.encode(name) + ':'
                         for i, name in enumerate(columns)]
        self.sink.write('[\n')

    def _write_row(self, row: Sequence[Any]) -> None:
        if self.keys is None or len(row) != len(self.keys):
            raise ValueError(f"row has {len(row)} values for {len(self.keys or ())} column names")
        # encode the whole row before writing so a bad value leaves no partial object
        parts = [(' {' if self.first else ',{')]
        for key, value in zip(self.keys, row):
            parts.append(key)
            parts.append(self.encoder.encode(text_value(value)))
        parts.append('}\n')
        self.sink.write(''.join(parts))
        self.first = False

    def _write_footer(self) -> None:
        self.sink.write(']\n')
        self.sink.flush()
