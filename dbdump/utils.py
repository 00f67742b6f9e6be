# dbdump/utils.py
"""
Utility functions for dbdump.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Union

from .defaults import settings

MIDNIGHT = dt.time(0, 0, 0)
BINARY_TYPES = (bytes, bytearray, memoryview)
# cache format strings for performance
_format_cache = None


def _build_format_strings():
    """Build format strings for datetime and date objects."""
    return {
        'date': settings.get('date_format', '%Y-%m-%d'),
        'datetime': settings.get('datetime_format', '%Y-%m-%d %H:%M:%S'),
        'datetime_tz': settings.get('datetime_format', '%Y-%m-%d %H:%M:%S') + \
                       settings.get('tz_suffix', '%z'),
        'timestamp': settings.get('timestamp_format', '%Y-%m-%d %H:%M:%S.%f'),
        'timestamp_tz': settings.get('timestamp_format', '%Y-%m-%d %H:%M:%S.%f') + \
                        settings.get('tz_suffix', '%z'),
        'time': settings.get('time_format', '%H:%M:%S'),
        'time_micro': settings.get('time_format', '%H:%M:%S') + '.%f',
        'time_tz': settings.get('time_format', '%H:%M:%S') + \
                   settings.get('tz_suffix', '%z'),
        'null': settings.get('null_string', ''),
    }


def reset_format_cache():
    """Clear format cache to force rebuilding on next call."""
    global _format_cache
    _format_cache = None


def _get_format_strings():
    global _format_cache
    if _format_cache is None:
        _format_cache = _build_format_strings()
    return _format_cache


def decode_binary(value: Union[bytes, bytearray, memoryview]) -> str:
    """
    Turn a binary column value into text.

    Dumps are meant to be read by people, not round-tripped byte for byte, so
    undecodable bytes are handled with ``settings['binary_errors']``
    (``'replace'`` by default) instead of failing the run.
    """
    return bytes(value).decode(settings.get('binary_encoding', 'utf-8'),
                               settings.get('binary_errors', 'replace'))


def format_interval(value: dt.timedelta) -> str:
    """
    Format a timedelta the way MySQL shows TIME values, e.g. ``-838:59:59``.

    Some drivers return TIME columns as timedelta since they can exceed 24 hours.
    """
    sign = '-' if value < dt.timedelta(0) else ''
    value = abs(value)
    hours, remainder = divmod(value.days * 86400 + value.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f'{sign}{hours:02d}:{minutes:02d}:{seconds:02d}'
    if value.microseconds:
        text += f'.{value.microseconds:06d}'
    return text


def format_datetime(value: dt.datetime) -> str:
    """
    Format a datetime with the configured datetime or timestamp format.

    Unlike :func:`to_string`, a value at midnight keeps its time of day.
    """
    fmts = _get_format_strings()
    key = 'timestamp' if value.microsecond else 'datetime'
    if value.tzinfo:
        key += '_tz'
    return value.strftime(fmts[key])


def to_string(obj: Any) -> str:
    """
    Convert a value to string representation.

    Args:
        obj: Value to convert

    Returns:
        String representation
    """
    fmts = _get_format_strings()
    if obj is None:
        return fmts['null']
    elif isinstance(obj, str):
        return obj
    elif isinstance(obj, dt.datetime):
        if obj.microsecond:
            if obj.tzinfo:
                return obj.strftime(fmts['timestamp_tz'])
            else:
                return obj.strftime(fmts['timestamp'])
        else:
            if obj.tzinfo:
                return obj.strftime(fmts['datetime_tz'])
            if obj.time() == MIDNIGHT:
                return obj.strftime(fmts['date'])
            else:
                return obj.strftime(fmts['datetime'])
    elif isinstance(obj, dt.date):
        return obj.strftime(fmts['date'])
    elif isinstance(obj, dt.time):
        if obj.microsecond:
            if obj.tzinfo:
                return obj.strftime(fmts['time_tz'])
            else:
                return obj.strftime(fmts['time_micro'])
        else:
            if obj.tzinfo:
                return obj.strftime(fmts['time_tz'])
            else:
                return obj.strftime(fmts['time'])
    elif isinstance(obj, dt.timedelta):
        return format_interval(obj)
    elif isinstance(obj, bool):
        return 'true' if obj else 'false'
    elif isinstance(obj, (int, float, Decimal)):
        return str(obj)
    elif isinstance(obj, BINARY_TYPES):
        return decode_binary(obj)
    elif hasattr(obj, 'read'):
        # LOB objects
        return to_string(obj.read())
    else:
        return str(obj)
