# dbdump/columns.py
"""
Column metadata for result sets.

A result set is described once per query by a list of ColumnDescriptor
objects. The semantic type tag on each descriptor decides how the column's
values are scanned and normalized (see :mod:`dbdump.converters`), independent
of the native type names a particular database reports.
"""

import datetime as dt
import re
from collections import namedtuple
from typing import Any, Optional

__all__ = ['SemanticType', 'ColumnDescriptor', 'classify_type_name', 'classify_type_code']


class SemanticType:
    """
    Abstract classification of a column's type.

    - SHORT_TEXT: CHAR/VARCHAR style columns, read as nullable strings
    - LONG_TEXT: TEXT/BLOB/BINARY style columns, binary payloads decoded to text
    - DATE, TIME, DATETIME: read as nullable strings, no re-parsing
    - TIMESTAMP: read as a structured date-time with a validity flag
    - OTHER: any other scalar, read with the driver's own type

    Example:
        >>> SemanticType.TIMESTAMP
        'timestamp'
        >>> 'date' in SemanticType.values()
        True
    """
    SHORT_TEXT = 'short-text'
    LONG_TEXT = 'long-text'
    DATE = 'date'
    TIME = 'time'
    DATETIME = 'datetime'
    TIMESTAMP = 'timestamp'
    OTHER = 'other'
    DEFAULT = OTHER

    @classmethod
    def values(cls):
        return [getattr(cls, attr) for attr in dir(cls)
                if not attr.startswith('_') and attr.isupper() and attr != 'DEFAULT']

    @classmethod
    def text_types(cls):
        """Types scanned into a nullable string cell."""
        return (cls.SHORT_TEXT, cls.DATE, cls.TIME, cls.DATETIME)


_ColumnBase = namedtuple('ColumnDescriptor', ['name', 'type_tag', 'length', 'type_name', 'scan_type'])


class ColumnDescriptor(_ColumnBase):
    """
    Immutable description of one result set column.

    Attributes
    ----------
    name : str
        Column name as reported by the cursor
    type_tag : str
        One of the SemanticType tags
    length : int, optional
        Declared display length, if the driver reports one
    type_name : str, optional
        Native type name (e.g. ``VARCHAR``), used for diagnostics
    scan_type : type, optional
        Python type the driver is expected to return for OTHER columns
    """
    __slots__ = ()

    def __new__(cls, name: str, type_tag: str = SemanticType.DEFAULT, length: Optional[int] = None,
                type_name: Optional[str] = None, scan_type: Optional[type] = None):
        if type_tag not in SemanticType.values():
            raise ValueError(f"Unknown semantic type '{type_tag}' for column '{name}'. "
                             f"Expected one of {SemanticType.values()}")
        return super().__new__(cls, name, type_tag, length, type_name, scan_type)

    @property
    def type_label(self) -> str:
        """Native type name with its declared length, e.g. ``VARCHAR(20)``."""
        label = self.type_name or self.type_tag
        if self.length is not None:
            label += f'({self.length})'
        return label


# Native type names, matched after stripping any "(n)" suffix and upper-casing
TYPE_NAMES = {
    SemanticType.SHORT_TEXT: {'CHAR', 'VARCHAR', 'NCHAR', 'NVARCHAR', 'VARCHAR2', 'NVARCHAR2',
                              'CHARACTER', 'CHARACTER VARYING', 'BPCHAR', 'ENUM', 'SET'},
    SemanticType.LONG_TEXT: {'TEXT', 'TINYTEXT', 'MEDIUMTEXT', 'LONGTEXT', 'NTEXT', 'CLOB', 'NCLOB',
                             'BLOB', 'TINYBLOB', 'MEDIUMBLOB', 'LONGBLOB', 'BINARY', 'VARBINARY',
                             'BYTEA', 'RAW', 'LONG RAW', 'IMAGE', 'JSON', 'GEOMETRY', 'BIT'},
    SemanticType.DATE: {'DATE'},
    SemanticType.TIME: {'TIME', 'TIME WITHOUT TIME ZONE'},
    SemanticType.DATETIME: {'DATETIME', 'DATETIME2', 'SMALLDATETIME'},
    SemanticType.TIMESTAMP: {'TIMESTAMP', 'TIMESTAMPTZ', 'TIMESTAMP WITH TIME ZONE',
                             'TIMESTAMP WITHOUT TIME ZONE', 'DATETIMEOFFSET'},
}
_TYPE_LOOKUP = {name: tag for tag, names in TYPE_NAMES.items() for name in names}
_LENGTH_SUFFIX = re.compile(r'\s*\(.*?\)')


def classify_type_name(type_name: Optional[str]) -> str:
    """
    Map a native database type name to a semantic type tag.

    Example:
        >>> classify_type_name('varchar(20)')
        'short-text'
        >>> classify_type_name('DECIMAL(10,2)')
        'other'
    """
    if not type_name:
        return SemanticType.OTHER
    name = ' '.join(_LENGTH_SUFFIX.sub('', type_name).upper().split())
    if name.startswith('UNSIGNED '):
        name = name[len('UNSIGNED '):]
    return _TYPE_LOOKUP.get(name, SemanticType.OTHER)


# Python types some drivers report as type_code
_PYTHON_TYPES = (
    (bytes, SemanticType.LONG_TEXT),
    (bytearray, SemanticType.LONG_TEXT),
    (str, SemanticType.SHORT_TEXT),
    (dt.datetime, SemanticType.TIMESTAMP),
    (dt.date, SemanticType.DATE),
    (dt.time, SemanticType.TIME),
)


def classify_type_code(type_code: Any, module: Any = None) -> str:
    """
    Map a DB-API ``description`` type_code to a semantic type tag.

    Args:
        type_code: Second item of a cursor.description entry
        module: Optional DB-API driver module. Its STRING, BINARY and DATETIME
            type objects are compared against type_code.

    Returns:
        Semantic type tag
    """
    if type_code is None:
        return SemanticType.OTHER
    if isinstance(type_code, str):
        return classify_type_name(type_code)
    if isinstance(type_code, type):
        for python_type, tag in _PYTHON_TYPES:
            if issubclass(type_code, python_type):
                return tag
        return SemanticType.OTHER
    if module is not None:
        # DB-API type objects compare equal to every type_code they cover
        if type_code == getattr(module, 'BINARY', object()):
            return SemanticType.LONG_TEXT
        if type_code == getattr(module, 'DATETIME', object()):
            return SemanticType.TIMESTAMP
        if type_code == getattr(module, 'STRING', object()):
            return SemanticType.SHORT_TEXT
    return SemanticType.OTHER
