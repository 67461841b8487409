"""Configuration package.

Provides the recursive Loader plus the path walker, decoders and settings it is built on.
"""
from .exceptions import ConfigLoadError, DecodeError, WalkStalledError  # noqa: F401
from .decoders import Decoder, ExtensionDecoder, JSONDecoder, YAMLDecoder  # noqa: F401
from .path_walker import PathWalker, walk  # noqa: F401
from .settings import LoaderSettings  # noqa: F401
from .config_loader import DEFAULT_LOADER, Loader, LoadSummary, new_loader  # noqa: F401
