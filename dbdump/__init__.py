# dbdump/__init__.py
"""
dbdump - streaming query result dumps

Renders the rows of an open database cursor in one of several output
layouts while streaming, without loading the result set into memory:

- Plain text, CSV and Excel-flavoured CSV (UTF-16LE with BOM)
- JSON Lines arrays, JSON array-of-arrays and array-of-objects documents
- Type-aware conversion of column values (NULL, text, binary, timestamps)
- YAML-based settings and logging setup

Basic usage::

    import sqlite3
    import dbdump

    db = sqlite3.connect('warehouse.db')
    dbdump.run_query(db, "SELECT * FROM users", layout='csv')

    # Any DB-API cursor that already ran a query
    cur = db.cursor()
    cur.execute("SELECT id, name FROM users")
    dbdump.stream_rows(dbdump.DBAPICursor(cur), dbdump.create_renderer('json-object'))
"""

__version__ = '0.1.0'

from .columns import ColumnDescriptor, SemanticType
from .config import get_setting, set_config_file
from .cursors import DBAPICursor, ListCursor, RowCursor, open_cursor
from .exceptions import CursorError, DumpError, EncodeError, QueryCancelled, ScanError, SinkError
from .layouts import create_renderer, get_all_layouts, register_layout
from .logging_utils import errors_logged, setup_logging
from .stream import run_query, stream_rows
from . import converters
from . import layouts

__all__ = [
    'run_query',
    'stream_rows',
    'create_renderer',
    'get_all_layouts',
    'register_layout',
    'RowCursor',
    'DBAPICursor',
    'ListCursor',
    'open_cursor',
    'ColumnDescriptor',
    'SemanticType',
    'DumpError',
    'ScanError',
    'EncodeError',
    'SinkError',
    'CursorError',
    'QueryCancelled',
    'get_setting',
    'set_config_file',
    'setup_logging',
    'errors_logged',
    'converters',
    'layouts',
]
