"""
cfgwalk - Recursive Configuration Loading
=========================================

Loads configuration files, possibly spread over a directory tree, into a
configuration object supplied by the caller.

Modules:
- config: Loader, path walker, decoders and settings
- utils: Logging setup
"""

__version__ = "1.0.0"

from .config import (
    DEFAULT_LOADER,
    ConfigLoadError,
    Decoder,
    DecodeError,
    ExtensionDecoder,
    JSONDecoder,
    Loader,
    LoaderSettings,
    LoadSummary,
    PathWalker,
    WalkStalledError,
    YAMLDecoder,
    new_loader,
    walk,
)
from .utils.logger import setup_logging

__all__ = [
    "DEFAULT_LOADER",
    "ConfigLoadError",
    "Decoder",
    "DecodeError",
    "ExtensionDecoder",
    "JSONDecoder",
    "Loader",
    "LoaderSettings",
    "LoadSummary",
    "PathWalker",
    "WalkStalledError",
    "YAMLDecoder",
    "new_loader",
    "walk",
    "setup_logging",
]
