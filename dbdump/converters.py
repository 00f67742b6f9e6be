# dbdump/converters.py
"""
Value conversion from raw driver values to generic row values.

Each column gets a scan target chosen from its semantic type tag. The cursor
stores the raw driver value into the target (``scan``) and the target then
yields the generic value handed to renderers (``value``). Generic values are
one of:

* ``None`` for SQL NULL
* ``str`` (binary payloads are decoded to text here, never later)
* ``datetime.datetime`` for structured timestamps
* any other scalar the driver returned (int, float, Decimal, ...)

The mapping from semantic type to target class lives in ``CONVERTERS`` and
can be extended with :func:`register_converter`.
"""

import datetime as dt
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Optional, Type

from dateutil import parser as dateutil_parser

from .columns import ColumnDescriptor, SemanticType
from .exceptions import ScanError
from .utils import BINARY_TYPES, MIDNIGHT, decode_binary, format_datetime, to_string

__all__ = ['ScanTarget', 'StringTarget', 'BinaryTarget', 'TimestampTarget', 'ValueTarget',
           'CONVERTERS', 'register_converter', 'select_scan_target', 'normalize']

_ZERO_DATE_PREFIX = '0000-00-00'


class ScanTarget(ABC):
    """
    Holder for one scanned cell.

    Targets are created fresh for every row and are not shared between
    columns, so they can keep whatever state the conversion needs.
    """

    def __init__(self, column: ColumnDescriptor):
        self.column = column

    @abstractmethod
    def scan(self, raw: Any) -> None:
        """Store a raw driver value. Raises ScanError if it does not fit."""
        pass

    @abstractmethod
    def value(self) -> Any:
        """Return the generic value for the stored cell."""
        pass

    def _mismatch(self, raw: Any, expected: str) -> ScanError:
        return ScanError(f"expected {expected}, got {type(raw).__name__} {raw!r}",
                         column=self.column.name)


class StringTarget(ScanTarget):
    """Nullable string cell used for short text, date, time and datetime columns."""

    def __init__(self, column: ColumnDescriptor):
        super().__init__(column)
        self._value = None

    def scan(self, raw: Any) -> None:
        if raw is None or isinstance(raw, str):
            self._value = raw
        elif isinstance(raw, BINARY_TYPES):
            self._value = decode_binary(raw)
        elif isinstance(raw, dt.datetime):
            self._value = format_datetime(raw)
        elif isinstance(raw, (dt.date, dt.time, dt.timedelta, int, float, Decimal)):
            # drivers that pre-parse temporal columns still produce text here
            self._value = to_string(raw)
        else:
            raise self._mismatch(raw, 'a string')

    def value(self) -> Optional[str]:
        return self._value


class BinaryTarget(ScanTarget):
    """Long text or binary cell. Binary payloads are decoded to text."""

    def __init__(self, column: ColumnDescriptor):
        super().__init__(column)
        self._value = None

    def scan(self, raw: Any) -> None:
        if raw is None or isinstance(raw, str):
            self._value = raw
        elif isinstance(raw, BINARY_TYPES):
            self._value = decode_binary(raw)
        elif hasattr(raw, 'read'):
            # LOB locators
            self.scan(raw.read())
        else:
            raise self._mismatch(raw, 'text or binary data')

    def value(self) -> Optional[str]:
        return self._value


class TimestampTarget(ScanTarget):
    """
    Structured timestamp with a validity flag.

    ``value()`` is None when the cell was NULL (or a MySQL zero date), else a
    ``datetime.datetime``. Drivers that hand back strings are parsed with
    dateutil, ISO 8601 first.

    Some drivers report TIME and INTERVAL columns with the DB-API DATETIME
    type code; their time and timedelta values are kept as text.
    """

    def __init__(self, column: ColumnDescriptor):
        super().__init__(column)
        self.valid = False
        self.time = None
        self.text = None

    def scan(self, raw: Any) -> None:
        self.valid = False
        self.time = None
        self.text = None
        if raw is None:
            return
        if isinstance(raw, BINARY_TYPES):
            raw = decode_binary(raw)
        if isinstance(raw, dt.datetime):
            self.time = raw
        elif isinstance(raw, dt.date):
            self.time = dt.datetime.combine(raw, MIDNIGHT)
        elif isinstance(raw, str):
            self.time = self._parse(raw)
        elif isinstance(raw, (dt.time, dt.timedelta)):
            self.text = to_string(raw)
            return
        else:
            raise self._mismatch(raw, 'a timestamp')
        self.valid = self.time is not None

    def _parse(self, text: str) -> Optional[dt.datetime]:
        text = text.strip()
        if not text or text.startswith(_ZERO_DATE_PREFIX):
            return None
        try:
            return dateutil_parser.isoparse(text)
        except ValueError:
            pass
        try:
            return dateutil_parser.parse(text)
        except (ValueError, OverflowError) as e:
            raise ScanError(f"invalid timestamp {text!r}: {e}", column=self.column.name) from e

    def value(self) -> Any:
        if self.text is not None:
            return self.text
        return self.time if self.valid else None


class ValueTarget(ScanTarget):
    """
    Default target for any other scalar.

    When the column declares a ``scan_type`` the raw value is coerced to it,
    otherwise the driver's value is kept as is.
    """

    def __init__(self, column: ColumnDescriptor):
        super().__init__(column)
        self.scan_type = column.scan_type
        self._value = None

    def scan(self, raw: Any) -> None:
        if raw is None:
            self._value = None
        elif isinstance(raw, BINARY_TYPES):
            self._value = decode_binary(raw)
        elif self.scan_type is None or isinstance(raw, self.scan_type):
            self._value = raw
        else:
            try:
                self._value = self.scan_type(raw)
            except (TypeError, ValueError, ArithmeticError) as e:
                raise ScanError(f"cannot convert {raw!r} to {self.scan_type.__name__}: {e}",
                                column=self.column.name) from e

    def value(self) -> Any:
        return self._value


CONVERTERS: Dict[str, Type[ScanTarget]] = {
    SemanticType.SHORT_TEXT: StringTarget,
    SemanticType.DATE: StringTarget,
    SemanticType.TIME: StringTarget,
    SemanticType.DATETIME: StringTarget,
    SemanticType.LONG_TEXT: BinaryTarget,
    SemanticType.TIMESTAMP: TimestampTarget,
}
DEFAULT_CONVERTER = ValueTarget


def register_converter(type_tag: str, target_class: Type[ScanTarget]) -> None:
    """Use target_class for every column tagged type_tag."""
    if type_tag not in SemanticType.values():
        raise ValueError(f"Unknown semantic type '{type_tag}'")
    CONVERTERS[type_tag] = target_class


def select_scan_target(column: ColumnDescriptor) -> ScanTarget:
    """Create a fresh scan target for column."""
    return CONVERTERS.get(column.type_tag, DEFAULT_CONVERTER)(column)


def normalize(target: ScanTarget) -> Any:
    """Return the generic value of a scanned target."""
    return target.value()
