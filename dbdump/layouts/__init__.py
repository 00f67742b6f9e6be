# dbdump/layouts/__init__.py
"""
Output layouts for streamed query results.

Every layout implements the same header/row/footer contract (see
:class:`~dbdump.layouts.base.BaseRenderer`) and is registered under a token.
Exactly one layout is used per run; it is chosen by the caller and handed to
the row stream driver.

Built-in layouts:

- ``text``: space separated values, one row per line (default)
- ``csv``: CSV output
- ``csv-Excel``: CSV encoded as UTF-16LE with BOM and a ``sep=;`` header line
- ``json-lines-array``: one JSON array per line, first line is the header
- ``json-array``: one JSON array of row arrays
- ``json-array-header``: like json-array, first element is the header
- ``json-object``: one JSON array of objects keyed by column name

Example
-------
::

    from dbdump.layouts import create_renderer

    renderer = create_renderer('json-object', sys.stdout)
    stream_rows(cursor, renderer)
"""

import logging
from typing import Dict, Optional, TextIO, Tuple, Type

from .base import BaseRenderer
from .csv import CSVExcelRenderer, CSVRenderer
from .json import JSONArrayHeaderRenderer, JSONArrayRenderer, JSONLinesRenderer, JSONObjectRenderer, RowEncoder
from .text import TextRenderer
from ..defaults import settings

logger = logging.getLogger(__name__)

# token -> (renderer class, help text)
LAYOUTS: Dict[str, Tuple[Type[BaseRenderer], str]] = {}


def register_layout(name: str, help: str = '', renderer: Optional[Type[BaseRenderer]] = None):
    """
    Register a renderer class under a layout token.

    Can be called directly or used as a class decorator::

        @register_layout('tsv', 'Tab separated output')
        class TSVRenderer(CSVRenderer):
            ...
    """
    def _register(cls):
        if not (isinstance(cls, type) and issubclass(cls, BaseRenderer)):
            raise TypeError(f"Layout '{name}' must be a BaseRenderer subclass, got {cls!r}")
        if name in LAYOUTS:
            logger.debug(f"Replacing layout '{name}' ({LAYOUTS[name][0].__name__} -> {cls.__name__})")
        cls.name = name
        LAYOUTS[name] = (cls, help)
        return cls

    if renderer is not None:
        return _register(renderer)
    return _register


def get_all_layouts() -> Dict[str, str]:
    """Layout tokens with their help text."""
    return {name: help_text for name, (_, help_text) in LAYOUTS.items()}


def get_layout(name: Optional[str] = None) -> Type[BaseRenderer]:
    """
    Look up the renderer class for a layout token.

    Args:
        name: Layout token. None uses settings['default_layout'].

    Raises:
        ValueError: If the token is not registered
    """
    if name is None:
        name = settings.get('default_layout', 'text')
    try:
        return LAYOUTS[name][0]
    except KeyError:
        raise ValueError(f"Unknown layout '{name}'. Available: {', '.join(LAYOUTS)}") from None


def create_renderer(name: Optional[str] = None, sink: Optional[TextIO] = None, **kwargs) -> BaseRenderer:
    """Build a renderer for a layout token, writing to sink (stdout by default)."""
    return get_layout(name)(sink, **kwargs)


register_layout('text', 'Plain text output: values separated by a space', TextRenderer)
register_layout('json-array', 'JSON output: each row is an array', JSONArrayRenderer)
register_layout('json-array-header', 'JSON output: each row is an array, the first array holds the column names',
                JSONArrayHeaderRenderer)
register_layout('json-object', 'JSON output: each row is an object with column names as keys', JSONObjectRenderer)
register_layout('json-lines-array', 'JSON Lines output: each line is a JSON array with values. First row is headers',
                JSONLinesRenderer)
register_layout('csv', 'CSV output', CSVRenderer)
register_layout('csv-Excel', 'CSV output, encoded as UTF-16LE with BOM and special Excel header', CSVExcelRenderer)

__all__ = ['BaseRenderer', 'TextRenderer', 'CSVRenderer', 'CSVExcelRenderer',
           'JSONLinesRenderer', 'JSONArrayRenderer', 'JSONArrayHeaderRenderer', 'JSONObjectRenderer',
           'RowEncoder', 'LAYOUTS', 'register_layout', 'get_all_layouts', 'get_layout', 'create_renderer']
