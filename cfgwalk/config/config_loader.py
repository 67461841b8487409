#!/usr/bin/env python3
"""Loader that reads configuration files, recursively if asked to.

Useful when configuration is spread over many files in a directory tree
(think ``/etc/apache2/mods-enabled/*.conf``):

- ``load_recursive`` walks a series of paths in their respective order and
  lets the decoder decode every file it claims.
- ``load_file`` decodes a single file.

Files are decoded one at a time, in walk order, into the same configuration
object; later files overwrite what earlier ones set.

Strict mode aborts on the first IO or decoding error. Lenient mode logs the
error, skips the file and carries on.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .decoders import Decoder, YAMLDecoder
from .exceptions import WalkStalledError
from .path_walker import DEFAULT_QUEUE_SIZE, walk
from .settings import LoaderSettings


@dataclass
class LoadSummary:
    """
    Report returned after a recursive load completes.
    """
    files_found: int = 0
    files_loaded: int = 0
    files_skipped: int = 0
    errors: List[str] = field(default_factory=list)


class Loader:
    """
    Traverses directories recursively and lets the decoder decode relevant files.

    A Loader holds no per-call state and can be shared between threads, as
    long as each call gets its own configuration object.
    """

    def __init__(
        self,
        decoder: Decoder,
        strict_mode: bool = True,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        stall_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            decoder: Decoder that filters and decodes files
            strict_mode: Fail completely on any IO or decoding error instead of
                skipping the offending file
            queue_size: Paths buffered ahead of the decoder during a walk
            stall_timeout: Seconds a walk waits on a stalled consumer
            logger: Diagnostics sink, defaults to this module's logger
        """
        self._decoder = decoder
        self._strict_mode = bool(strict_mode)
        self._queue_size = queue_size
        self._stall_timeout = stall_timeout
        self._log = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        decoder: Decoder,
        settings: LoaderSettings,
        logger: Optional[logging.Logger] = None,
    ) -> "Loader":
        return cls(
            decoder,
            strict_mode=settings.strict_mode,
            queue_size=settings.queue_size,
            stall_timeout=settings.stall_timeout,
            logger=logger,
        )

    @property
    def decoder(self) -> Decoder:
        return self._decoder

    @property
    def strict_mode(self) -> bool:
        return self._strict_mode

    @property
    def queue_size(self) -> int:
        return self._queue_size

    @property
    def stall_timeout(self) -> Optional[float]:
        return self._stall_timeout

    def __repr__(self) -> str:
        return f"Loader(decoder={self._decoder!r}, strict_mode={self._strict_mode})"

    # ------------------------------------------------------------------
    def load_recursive(self, config: Any, *paths: str | os.PathLike[str]) -> LoadSummary:
        """
        Walk the paths recursively in their respective order and decode every
        file the decoder accepts into config.

        Args:
            config: Configuration object to populate
            *paths: Files or directories to walk

        Returns:
            Summary of the files found, loaded and skipped

        Raises:
            OSError: Strict mode, a file could not be opened
            WalkStalledError: Strict mode, the walk gave up before every path was delivered
            Exception: Strict mode, whatever the decoder raised
        """
        summary = LoadSummary()
        walker = walk(
            *paths,
            queue_size=self._queue_size,
            stall_timeout=self._stall_timeout,
            logger=self._log,
        )
        try:
            for path in walker:
                summary.files_found += 1
                if not self._decoder.can_decode(path):
                    self._log.debug(f"No decoder for {path}, skipping")
                    summary.files_skipped += 1
                    continue

                error = self._load(config, path)
                if error is None:
                    summary.files_loaded += 1
                    continue

                if self._strict_mode:
                    raise error
                summary.files_skipped += 1
                summary.errors.append(f"{path}: {error}")
        except WalkStalledError as e:
            # The walker already logged the stall
            if self._strict_mode:
                raise
            summary.errors.append(str(e))
        finally:
            walker.cancel()

        self._log.debug(
            f"Loaded {summary.files_loaded}/{summary.files_found} files "
            f"({len(summary.errors)} errors)"
        )
        return summary

    def load_file(self, config: Any, path: str | os.PathLike[str]) -> bool:
        """
        Decode a single file into config.

        Args:
            config: Configuration object to populate
            path: File to read

        Returns:
            True if the file was decoded, False if lenient mode skipped it

        Raises:
            OSError: Strict mode, the file could not be opened
            Exception: Strict mode, whatever the decoder raised
        """
        error = self._load(config, os.fspath(path))
        if error is None:
            return True
        if self._strict_mode:
            raise error
        return False

    def _load(self, config: Any, path: str) -> Optional[Exception]:
        """Open and decode one file, returning the failure instead of raising it."""
        self._log.debug(f"Reading config file {path}")
        try:
            fp = open(path, 'rb')
        except OSError as e:
            self._log.info(f"Error opening file {path}: {e}")
            return e

        with fp:
            try:
                self._decoder.decode(fp, config)
            except Exception as e:
                self._log.info(f"Error decoding file {path}: {e}")
                return e
        return None


def new_loader(decoder: Decoder, strict: bool) -> Loader:
    """Create a Loader wrapping decoder, using strict mode if specified."""
    return Loader(decoder, strict_mode=strict)


# YAML based loader in strict mode, for convenience
DEFAULT_LOADER = new_loader(YAMLDecoder(), True)

__all__ = ["Loader", "LoadSummary", "new_loader", "DEFAULT_LOADER"]
