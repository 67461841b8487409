#!/usr/bin/env python3
"""
Loader settings read from the environment (and an optional .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigLoadError
from .path_walker import DEFAULT_QUEUE_SIZE

ENV_PREFIX = 'CFGWALK_'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigLoadError(f"{name} must be a boolean, got {value!r}")


@dataclass
class LoaderSettings:
    """Settings for building a Loader and configuring its logging"""

    strict_mode: bool = True
    queue_size: int = DEFAULT_QUEUE_SIZE
    stall_timeout: Optional[float] = None
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    log_max_size: str = '10MB'
    log_backup_count: int = 5

    def __post_init__(self):
        if self.queue_size < 1:
            raise ConfigLoadError(f"queue_size must be positive, got {self.queue_size}")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> 'LoaderSettings':
        """
        Create settings from CFGWALK_* environment variables.

        Values from the .env file (dotenv_path, or the nearest .env found from
        the working directory upwards) are written into os.environ, except
        for variables that are already set.
        """
        if dotenv_path is None:
            dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path)

        def env(name: str) -> str:
            return os.getenv(ENV_PREFIX + name, '').strip()

        strict = env('STRICT_MODE')
        queue_size = env('QUEUE_SIZE')
        stall_timeout = env('STALL_TIMEOUT')
        backup_count = env('LOG_BACKUP_COUNT')

        try:
            return cls(
                strict_mode=_parse_bool(ENV_PREFIX + 'STRICT_MODE', strict) if strict else True,
                queue_size=int(queue_size) if queue_size else DEFAULT_QUEUE_SIZE,
                stall_timeout=float(stall_timeout) if stall_timeout else None,
                log_level=env('LOG_LEVEL') or 'INFO',
                log_file=env('LOG_FILE') or None,
                log_max_size=env('LOG_MAX_SIZE') or '10MB',
                log_backup_count=int(backup_count) if backup_count else 5,
            )
        except ValueError as e:
            raise ConfigLoadError(f"Invalid {ENV_PREFIX}* setting: {e}") from e


__all__ = ["LoaderSettings", "ENV_PREFIX"]
