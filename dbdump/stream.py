# dbdump/stream.py
"""
Row stream driver: pulls rows from a cursor and feeds them to a renderer.

The driver makes a single forward pass. Rows are converted and written one
at a time in cursor order, so memory use does not grow with the result set.
Any error stops the run at once; the cursor is closed on every exit path and
the error is re-raised. Output already written is not retracted.
"""

import logging
from typing import Mapping, Optional, Sequence, TextIO, Union

from .converters import normalize, select_scan_target
from .cursors import ColumnTypes, RowCursor, open_cursor
from .exceptions import CursorError, DumpError, QueryCancelled, ScanError
from .layouts import BaseRenderer, create_renderer

logger = logging.getLogger(__name__)
__all__ = ['stream_rows', 'run_query']


def _check_cancel(cancel) -> None:
    if cancel is not None and cancel.is_set():
        raise QueryCancelled('Query cancelled')


def _stream(cursor: RowCursor, renderer: BaseRenderer, cancel) -> int:
    _check_cancel(cancel)
    if not cursor.next():
        # empty result set: renderers still produce a complete document
        renderer.write_header(None)
        renderer.write_footer()
        return 0

    columns = cursor.columns()
    for i, column in enumerate(columns):
        logger.debug(f"Column {i}: {column.name} {column.type_label} -> {column.type_tag}")
    renderer.write_header([column.name for column in columns])

    row_num = 1
    while True:
        targets = [select_scan_target(column) for column in columns]
        try:
            cursor.scan(targets)
        except ScanError as e:
            raise ScanError(e.reason, column=e.column, row_num=row_num) from e
        renderer.write_row([normalize(target) for target in targets])
        _check_cancel(cancel)
        if not cursor.next():
            break
        row_num += 1

    renderer.write_footer()
    return row_num


def stream_rows(cursor: RowCursor, renderer: BaseRenderer, cancel=None) -> int:
    """
    Render every row of cursor with renderer.

    Calls ``write_header`` once (with None for an empty result set), then
    ``write_row`` for each row in cursor order, then ``write_footer`` once.
    The cursor is closed when the run ends, successfully or not.

    Args:
        cursor: Forward-only cursor positioned before the first row
        renderer: The layout to write with, used for this run only
        cancel: Optional ``threading.Event``. Checked before each advance of
            the cursor; once set the run stops with QueryCancelled.

    Returns:
        Number of rows written

    Raises:
        ScanError, EncodeError, SinkError, CursorError: Any failure is fatal.
            A document may be left incomplete (e.g. no closing bracket).
    """
    layout = renderer.name or type(renderer).__name__
    try:
        count = _stream(cursor, renderer, cancel)
    except BaseException as e:
        if isinstance(e, DumpError):
            logger.error(f"Error writing {layout} output: {e}")
        try:
            cursor.close()
        except CursorError as close_error:
            logger.warning(f"Failed to close cursor after error: {close_error}")
        raise
    cursor.close()
    logger.info(f"Wrote {count} rows as {layout}")
    return count


def run_query(connection,
              sql: str,
              params: Optional[Union[Sequence, Mapping]] = None,
              layout: Optional[str] = None,
              sink: Optional[TextIO] = None,
              column_types: Optional[ColumnTypes] = None,
              cancel=None,
              **layout_kwargs) -> int:
    """
    Execute a query on a DB-API connection and stream its result.

    Args:
        connection: DB-API 2.0 connection
        sql: Query text
        params: Bind parameters
        layout: Layout token. None uses settings['default_layout'] ('text')
        sink: Text stream to write to. Defaults to stdout
        column_types: Semantic type overrides by position or column name
        cancel: Optional ``threading.Event`` to stop the run between rows
        **layout_kwargs: Additional arguments passed to the renderer

    Returns:
        Number of rows written

    Example
    -------
    ::

        import sqlite3
        from dbdump import run_query

        db = sqlite3.connect('avatar.db')
        run_query(db, "SELECT id, name, born FROM benders WHERE nation = ?", ('water',),
                  layout='json-object', column_types={'born': 'timestamp'})
    """
    renderer = create_renderer(layout, sink, **layout_kwargs)
    cursor = open_cursor(connection, sql, params, column_types=column_types)
    return stream_rows(cursor, renderer, cancel)
