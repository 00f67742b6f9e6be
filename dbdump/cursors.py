# dbdump/cursors.py
"""
Forward-only row cursors consumed by the row stream driver.

A RowCursor exposes the four capabilities the driver needs: describe the
columns, advance to the next row, scan the current row into targets and
close. DBAPICursor adapts any DB-API 2.0 cursor; ListCursor serves rows that
are already in memory.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .columns import ColumnDescriptor, SemanticType, classify_type_code, classify_type_name
from .exceptions import CursorError, ScanError

logger = logging.getLogger(__name__)
__all__ = ['RowCursor', 'DBAPICursor', 'ListCursor', 'open_cursor']

ColumnTypes = Union[Sequence[Optional[str]], Mapping[str, str]]


class RowCursor(ABC):
    """
    Abstract forward-only cursor over a result set.

    Subclasses implement ``columns()``, ``next()`` and ``current()``. The
    default ``scan()`` feeds the current raw row into the scan targets and
    ``close()`` is a no-op. Cursors are context managers.
    """

    @abstractmethod
    def columns(self) -> List[ColumnDescriptor]:
        """Describe the result set columns."""
        pass

    @abstractmethod
    def next(self) -> bool:
        """Advance to the next row. Returns False once the result set is exhausted."""
        pass

    @abstractmethod
    def current(self) -> Sequence[Any]:
        """Raw values of the row the cursor is positioned on."""
        pass

    def scan(self, targets: Sequence[Any]) -> None:
        """Store each value of the current row into the matching scan target."""
        raw_row = self.current()
        if len(raw_row) != len(targets):
            raise ScanError(f"row has {len(raw_row)} values for {len(targets)} columns")
        for target, raw in zip(targets, raw_row):
            target.scan(raw)

    def close(self) -> None:
        """Release the cursor. Safe to call more than once."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _resolve_type(name: str, index: int, column_types: Optional[ColumnTypes]) -> Optional[str]:
    """Look up a caller supplied type for a column, by name or position."""
    if column_types is None:
        return None
    if isinstance(column_types, Mapping):
        declared = column_types.get(name)
    elif index < len(column_types):
        declared = column_types[index]
    else:
        declared = None
    if declared is None:
        return None
    if declared in SemanticType.values():
        return declared
    return classify_type_name(declared)


class DBAPICursor(RowCursor):
    """
    Adapter for a DB-API 2.0 cursor that has already executed a query.

    Semantic types are derived from ``cursor.description``: native type names
    (some drivers report strings), Python types, or the driver module's
    STRING/BINARY/DATETIME type objects. Drivers that report no type at all,
    such as sqlite3, can be given ``column_types``.

    Parameters
    ----------
    cursor
        Executed DB-API cursor
    module : module, optional
        DB-API driver module used to interpret type codes
    column_types : list or dict, optional
        Semantic tags or native type names, by position or by column name.
        Overrides what the driver reports.

    Example
    -------
    ::

        cur = connection.cursor()
        cur.execute("SELECT id, name, created FROM users")
        with DBAPICursor(cur, column_types={'created': 'TIMESTAMP'}) as rows:
            stream_rows(rows, create_renderer('json-object'))
    """

    def __init__(self, cursor, module=None, column_types: Optional[ColumnTypes] = None):
        self._cursor = cursor
        self.module = module
        self.column_types = column_types
        self._columns = None
        self._row = None
        self._closed = False

    def columns(self) -> List[ColumnDescriptor]:
        if self._columns is not None:
            return self._columns
        try:
            description = self._cursor.description
        except Exception as e:
            raise CursorError(f"Columns: {e}") from e
        if description is None:
            raise CursorError('Query has not been run or did not return a result set.')

        columns = []
        for i, entry in enumerate(description):
            name, type_code = entry[0], entry[1]
            type_tag = _resolve_type(name, i, self.column_types)
            if type_tag is None:
                type_tag = classify_type_code(type_code, self.module)
            if isinstance(type_code, str):
                type_name = type_code
            elif isinstance(type_code, type):
                type_name = type_code.__name__
            else:
                type_name = None
            scan_type = type_code if isinstance(type_code, type) and type_tag == SemanticType.OTHER else None
            length = None
            if len(entry) > 3:
                length = entry[2] if isinstance(entry[2], int) else entry[3] if isinstance(entry[3], int) else None
            columns.append(ColumnDescriptor(name, type_tag, length, type_name, scan_type))
        self._columns = columns
        return columns

    def next(self) -> bool:
        try:
            self._row = self._cursor.fetchone()
        except Exception as e:
            raise CursorError(f"Next: {e}") from e
        return self._row is not None

    def current(self) -> Sequence[Any]:
        if self._row is None:
            raise CursorError('Cursor is not positioned on a row.')
        return self._row

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._cursor.close()
        except Exception as e:
            raise CursorError(f"Close: {e}") from e


class ListCursor(RowCursor):
    """
    Cursor over rows that are already in memory (or any iterable of rows).

    Rows are pulled lazily from the iterable, one per ``next()`` call.

    Example
    -------
    ::

        cursor = ListCursor([ColumnDescriptor('id'), ColumnDescriptor('name', 'short-text')],
                            [(1, 'Aang'), (2, 'Katara')])
    """

    def __init__(self, columns: Sequence[Union[ColumnDescriptor, str]], rows: Iterable[Sequence[Any]]):
        self._columns = [c if isinstance(c, ColumnDescriptor) else ColumnDescriptor(c) for c in columns]
        self._rows = iter(rows)
        self._row = None
        self.closed = False

    def columns(self) -> List[ColumnDescriptor]:
        return self._columns

    def next(self) -> bool:
        if self.closed:
            raise CursorError('Cursor is closed.')
        self._row = next(self._rows, None)
        return self._row is not None

    def current(self) -> Sequence[Any]:
        if self._row is None:
            raise CursorError('Cursor is not positioned on a row.')
        return self._row

    def close(self) -> None:
        self.closed = True


def _driver_module(connection):
    """Find the DB-API module a connection object belongs to, if loaded."""
    module = sys.modules.get(type(connection).__module__.split('.')[0])
    if module is not None and hasattr(module, 'paramstyle'):
        return module
    return None


def open_cursor(connection, sql: str, params: Optional[Union[Sequence, Mapping]] = None,
                column_types: Optional[ColumnTypes] = None) -> DBAPICursor:
    """
    Execute a query on a DB-API connection and wrap the cursor.

    The underlying cursor is closed if execution fails.

    Args:
        connection: DB-API 2.0 connection
        sql: Query text
        params: Bind parameters
        column_types: Semantic type overrides, see DBAPICursor

    Returns:
        DBAPICursor positioned before the first row

    Raises:
        CursorError: If the cursor cannot be created or the query fails
    """
    try:
        cursor = connection.cursor()
    except Exception as e:
        raise CursorError(f"Prepare: {e}") from e
    try:
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)
    except Exception as e:
        logger.error(f"Error executing query\nSQL: {sql}\nParameters: {params}")
        cursor.close()
        raise CursorError(f"Exec: {e}") from e
    return DBAPICursor(cursor, module=_driver_module(connection), column_types=column_types)
