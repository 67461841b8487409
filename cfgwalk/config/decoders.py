"""
Configuration Decoders
======================

A decoder decides which files it understands and unmarshals their contents
into a caller-supplied configuration object. YAML and JSON are provided.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from typing import IO, Any, Iterable, Optional, Tuple

import yaml

from .exceptions import DecodeError

logger = logging.getLogger(__name__)


class Decoder(ABC):
    """
    Interface for configuration decoders.
    """

    @abstractmethod
    def decode(self, stream: IO[bytes], config: Any) -> None:
        """
        Read all data from the stream and unmarshal it into the config object.

        Args:
            stream: File opened for reading in binary mode
            config: Target configuration object, mutated in place

        Raises:
            Exception: Any error; the loader's strict mode decides whether it aborts
        """
        raise NotImplementedError

    @abstractmethod
    def can_decode(self, path: str) -> bool:
        """
        Return True if the file at path is decodable by this decoder,
        based on extension or similar mechanisms.
        """
        raise NotImplementedError


def apply_document(document: Any, config: Any, path: Optional[str] = None) -> None:
    """
    Apply a decoded top-level document to the configuration object.

    Mapping targets are updated key by key. Other objects get an attribute
    set for every key they already define; unknown keys are ignored.

    Args:
        document: Parsed document (None for an empty file)
        config: Target configuration object
        path: Source file, used in error messages

    Raises:
        DecodeError: If the document is not a mapping
    """
    if document is None:
        return

    if not isinstance(document, Mapping):
        raise DecodeError(
            f"Top-level document must be a mapping, got {type(document).__name__}", path
        )

    if isinstance(config, MutableMapping):
        config.update(document)
        return

    for key, value in document.items():
        if isinstance(key, str) and hasattr(config, key):
            setattr(config, key, value)
        else:
            logger.debug(f"Ignoring unknown key {key!r} in {path}")


class ExtensionDecoder(Decoder):
    """Decoder that claims files by their (case-insensitive) extension."""

    extensions: Tuple[str, ...] = ()

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        if extensions is not None:
            self.extensions = tuple(extensions)
        self.extensions = tuple(ext.lower() for ext in self.extensions)

    def can_decode(self, path: str) -> bool:
        return os.path.splitext(path)[1].lower() in self.extensions


class YAMLDecoder(ExtensionDecoder):
    """YAML decoder backed by PyYAML's safe loader."""

    extensions = ('.yaml', '.yml')

    def decode(self, stream: IO[bytes], config: Any) -> None:
        path = getattr(stream, 'name', None)
        try:
            document = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise DecodeError(f"Invalid YAML: {e}", path) from e
        apply_document(document, config, path)


class JSONDecoder(ExtensionDecoder):
    """JSON decoder."""

    extensions = ('.json',)

    def decode(self, stream: IO[bytes], config: Any) -> None:
        path = getattr(stream, 'name', None)
        try:
            document = json.load(stream)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Invalid JSON: {e}", path) from e
        apply_document(document, config, path)


__all__ = [
    "Decoder",
    "ExtensionDecoder",
    "YAMLDecoder",
    "JSONDecoder",
    "apply_document",
]
