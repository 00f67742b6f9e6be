# dbdump/logging_utils.py
"""
Logging setup for scripts that dump query results.

Standard output usually carries the rendered result set, so console logging
goes to stderr. Log files follow the pattern script_name_YYYYMMDD_HHMMSS.log.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

_error_handler: Optional['ErrorCountHandler'] = None
_main_log_path: Optional[str] = None
_error_log_path: Optional[str] = None


class ErrorCountHandler(logging.Handler):
    """Counts ERROR and CRITICAL records and opens the error log on the first one."""

    def __init__(self, error_log_path: Optional[str] = None, formatter: Optional[logging.Formatter] = None):
        super().__init__(level=logging.ERROR)
        self.error_count = 0
        self.error_log_path = error_log_path
        self.formatter = formatter
        self._error_file_handler = None

    def emit(self, record):
        if record.levelno < logging.ERROR:
            return
        self.error_count += 1
        if self.error_log_path and self._error_file_handler is None:
            try:
                handler = logging.FileHandler(self.error_log_path, encoding='utf-8')
            except OSError as e:
                logger.warning(f"Failed to create error log file: {e}")
                self.error_log_path = None
                return
            handler.setLevel(logging.ERROR)
            if self.formatter:
                handler.setFormatter(self.formatter)
            logging.getLogger().addHandler(handler)
            self._error_file_handler = handler


def setup_logging(
    script_name: Optional[str] = None,
    log_dir: Optional[str] = None,
    level: Optional[str] = None,
    split_errors: Optional[bool] = None,
    console: Optional[bool] = None
) -> Tuple[str, Optional[str]]:
    """
    Configure logging for a dump script.

    Args:
        script_name: Base name for log files (defaults to script filename without extension)
        log_dir: Directory for log files (defaults to settings or './logs')
        level: Logging level string - DEBUG, INFO, WARNING, ERROR (defaults to settings or 'INFO')
        split_errors: Create separate error log file when errors occur
        console: Also log to stderr

    Returns:
        Tuple of (log_file_path, error_log_path or None)

    Example
    -------
    ::

        import dbdump

        dbdump.setup_logging('nightly_export', level='DEBUG')
        dbdump.run_query(db, 'SELECT * FROM orders', layout='csv')
    """
    from dbdump.config import get_setting

    if script_name is None:
        script_name = Path(sys.argv[0]).stem or 'dbdump'

    log_dir = log_dir or get_setting('logging.directory', './logs')
    level = (level or get_setting('logging.level', 'INFO')).upper()
    if split_errors is None:
        split_errors = get_setting('logging.split_errors', True)
    if console is None:
        console = get_setting('logging.console', True)
    log_format = get_setting('logging.format', '%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    timestamp_format = get_setting('logging.timestamp_format', '%Y-%m-%d %H:%M:%S')
    filename_format = get_setting('logging.filename_format', '%Y%m%d_%H%M%S')

    log_dir_path = Path(log_dir)
    log_dir_path.mkdir(parents=True, exist_ok=True)

    suffix = f"_{datetime.now().strftime(filename_format)}" if filename_format else ''
    log_file = log_dir_path / f"{script_name}{suffix}.log"
    error_file = log_dir_path / f"{script_name}{suffix}_error.log" if split_errors else None

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    root_logger.handlers.clear()

    formatter = logging.Formatter(log_format, datefmt=timestamp_format)

    global _error_handler, _main_log_path, _error_log_path
    _error_handler = ErrorCountHandler(str(error_file) if error_file else None, formatter)
    root_logger.addHandler(_error_handler)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level))
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _main_log_path = str(log_file)
    _error_log_path = str(error_file) if error_file else None
    logging.info(f"Logging initialized: {log_file}")

    return _main_log_path, _error_log_path


def errors_logged() -> Optional[str]:
    """
    Path of the log holding errors, or None if no ERROR was logged.

    Returns the error log when errors are split out, the main log otherwise.
    Returns None as well when setup_logging() was never called.
    """
    if _error_handler is None:
        logger.warning("errors_logged() called but setup_logging() was not called")
        return None
    if _error_handler.error_count == 0:
        return None
    return _error_handler.error_log_path or _main_log_path
