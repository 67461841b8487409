"""
Configuration Errors
====================

Exceptions raised while loading configuration files.
"""

from typing import Optional


class ConfigLoadError(Exception):
    """
    Exception raised when configuration loading fails.

    This can be due to an invalid environment setting or a file whose
    contents cannot be applied to the configuration object.
    """
    pass


class DecodeError(ConfigLoadError):
    """Raised by decoders when a file cannot be decoded."""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
        if path:
            self.message = f"{message} (File: {path})"
        else:
            self.message = message

    def __str__(self):
        return self.message


class WalkStalledError(ConfigLoadError):
    """Raised when a walk gave up waiting on its consumer before it finished."""
    def __init__(self, stall_timeout: Optional[float]):
        super().__init__(
            f"Walk abandoned after the consumer stopped reading for {stall_timeout}s; "
            f"remaining paths were not delivered"
        )
        self.stall_timeout = stall_timeout
