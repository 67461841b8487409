"""
Logging Utilities
=================

Attaches console and rotating-file handlers to the ``cfgwalk`` logger.

Only that logger is touched: the root logger and handlers installed by the
application stay as they are, and records still propagate to them.
"""

import logging
import logging.handlers
import os
import re
import sys
from typing import IO, Optional, Union

from ..config.exceptions import ConfigLoadError
from ..config.settings import LoaderSettings

APP_LOGGER_NAME = 'cfgwalk'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_SIZE_UNITS = {'': 1, 'B': 1, 'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}
_SIZE_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(KB|MB|GB|B)?\s*$', re.IGNORECASE)

# Marks handlers added here so a second setup replaces them instead of stacking
_HANDLER_FLAG = '_cfgwalk_handler'


def parse_size(size: Union[int, str]) -> int:
    """
    Convert a size such as '512', '64KB' or '1.5GB' to bytes.

    Raises:
        ConfigLoadError: If the size cannot be parsed
    """
    if isinstance(size, int):
        return size
    match = _SIZE_PATTERN.match(str(size))
    if not match:
        raise ConfigLoadError(f"Invalid size {size!r}, expected e.g. '10MB'")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or '').upper()])


def setup_logging(
    settings: Optional[LoaderSettings] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Configure the cfgwalk logger from loader settings.

    Args:
        settings: Level and log file settings, defaults to LoaderSettings()
        stream: Console stream, defaults to stdout

    Returns:
        The configured cfgwalk logger

    Raises:
        ConfigLoadError: Unknown log level or invalid log size
    """
    settings = settings or LoaderSettings()

    level = logging.getLevelName(str(settings.log_level).upper())
    if not isinstance(level, int):
        raise ConfigLoadError(f"Unknown log level {settings.log_level!r}")

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in app_logger.handlers[:]:
        if getattr(handler, _HANDLER_FLAG, False):
            app_logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if settings.log_file:
        log_dir = os.path.dirname(settings.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            settings.log_file,
            maxBytes=parse_size(settings.log_max_size),
            backupCount=settings.log_backup_count,
            encoding='utf-8'
        ))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_FLAG, True)
        app_logger.addHandler(handler)
    app_logger.setLevel(level)

    app_logger.debug(f"Logging initialized - Level: {settings.log_level}, File: {settings.log_file}")
    return app_logger
