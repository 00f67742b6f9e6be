# dbdump/layouts/text.py
"""
Plain text layout: one line per row, values separated by a space.
"""

import logging
from typing import Any, Optional, Sequence, TextIO

from .base import BaseRenderer
from ..defaults import settings
from ..utils import to_string

logger = logging.getLogger(__name__)


class TextRenderer(BaseRenderer):
    """Plain text renderer. No header, no footer, NULL shown as ``settings['null_string_text']``."""

    def __init__(self, sink: Optional[TextIO] = None, null_string: Optional[str] = None):
        super().__init__(sink)
        self.null_string = settings.get('null_string_text', 'NULL') if null_string is None else null_string

    def to_string(self, obj: Any) -> str:
        if obj is None:
            return self.null_string
        return to_string(obj)

    def _write_row(self, row: Sequence[Any]) -> None:
        self.sink.write(' '.join(self.to_string(value) for value in row) + '\n')
