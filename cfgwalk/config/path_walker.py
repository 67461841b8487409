"""
Recursive Path Walker
=====================

Walks a series of root paths depth-first on a background thread and hands
every file path found to the consumer through a bounded queue.

Paths come out in pre-order: roots in the order given, directory entries
sorted by name, subdirectories descended into before their later siblings.
The consumer can stop the walk at any time with ``cancel()``; dropping the
walker does the same.
"""

import logging
import os
import queue
import threading
import weakref
from typing import Iterator, List, Optional

from .exceptions import WalkStalledError

DEFAULT_QUEUE_SIZE = 100

# How often blocked queue operations wake up to look at the cancel flag
_POLL_INTERVAL = 0.05

# End-of-stream marker
_DONE = object()


class _Producer:
    """
    State shared with the background thread.

    Kept apart from PathWalker so the thread never holds a reference to the
    walker itself, and a walker nobody uses any more can be collected.
    """

    def __init__(self, paths: List[str], queue_size: int,
                 stall_timeout: Optional[float], log: logging.Logger):
        self.paths = paths
        self.stall_timeout = stall_timeout
        self.log = log
        self.queue: "queue.Queue" = queue.Queue(maxsize=queue_size)
        self.cancelled = threading.Event()
        self.stalled = False

    def cancel(self) -> None:
        self.cancelled.set()
        # Free up room so a put() blocked on a full queue wakes and sees the flag
        while True:
            try:
                self.queue.get_nowait()
            except queue.Empty:
                break

    def run(self) -> None:
        try:
            for root in self.paths:
                if not self._walk_root(root):
                    self.log.debug(f"Walk of {root} stopped early")
                    return
        finally:
            self._emit(_DONE)

    def _walk_root(self, root: str) -> bool:
        """Walk a single root. Returns False if the walk should stop."""
        if os.path.isfile(root):
            return self._emit(root)

        # Stack of directory listings still being visited, deepest last
        stack = []
        listing = self._list_dir(root)
        if listing is not None:
            stack.append(listing)

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            if self._is_dir(entry):
                if self.cancelled.is_set():
                    return False
                listing = self._list_dir(entry.path)
                if listing is not None:
                    stack.append(listing)
                continue

            if not self._emit(entry.path):
                return False

        return True

    def _list_dir(self, path: str) -> Optional[Iterator[os.DirEntry]]:
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self.log.error(f"Could not read path {path}: {e}")
            return None
        return iter(entries)

    def _is_dir(self, entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False

    def _emit(self, item) -> bool:
        """
        Hand an item to the consumer, waiting while the queue is full.

        Returns False if the walk was cancelled or the consumer stalled.
        """
        waited = 0.0
        while not self.cancelled.is_set():
            try:
                self.queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                waited += _POLL_INTERVAL
                if self.stall_timeout is not None and waited >= self.stall_timeout:
                    if not self.stalled:
                        self.stalled = True
                        self.log.error(
                            f"Consumer stopped reading for {self.stall_timeout}s, abandoning walk"
                        )
                    return False
        return False


class PathWalker:
    """
    Handle for a single walk: iterate it for paths, cancel it to stop early.

    A walker is single-pass. Leaving the iteration early (break, exception or
    the iterator being garbage collected) cancels the walk, and so does
    dropping a walker that was never iterated.
    """

    def __init__(
        self,
        paths: List[str],
        queue_size: int = DEFAULT_QUEUE_SIZE,
        stall_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            paths: Root paths, walked in order
            queue_size: Maximum number of paths buffered ahead of the consumer
            stall_timeout: Seconds the walk waits on a full queue before giving
                up; None waits until cancelled
            logger: Diagnostics sink, defaults to the module logger
        """
        if queue_size < 1:
            raise ValueError(f"queue_size must be positive, got {queue_size}")

        self._producer = _Producer(
            [os.path.abspath(os.fspath(p)) for p in paths],
            queue_size,
            stall_timeout,
            logger or logging.getLogger(__name__),
        )
        self._consumed = False
        self._thread = threading.Thread(
            target=self._producer.run, name="cfgwalk-walker", daemon=True
        )
        weakref.finalize(self, self._producer.cancel)

    @property
    def paths(self) -> List[str]:
        return self._producer.paths

    @property
    def stall_timeout(self) -> Optional[float]:
        return self._producer.stall_timeout

    # ------------------------------------------------------------------
    def start(self) -> "PathWalker":
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Stop the walk. Safe to call more than once and from any thread."""
        self._producer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._producer.cancelled.is_set()

    @property
    def stalled(self) -> bool:
        """True if the walk gave up on a consumer that stopped reading."""
        return self._producer.stalled

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the background thread; returns True once it has exited."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[str]:
        if self._consumed:
            raise RuntimeError("PathWalker can only be iterated once; call walk() again")
        self._consumed = True
        return self._consume()

    def _consume(self) -> Iterator[str]:
        """
        Yield paths until the walk ends.

        Raises:
            WalkStalledError: The walk gave up before every path was delivered
        """
        try:
            while True:
                item = self._next()
                if item is _DONE:
                    break
                yield item
            if self._producer.stalled and not self.cancelled:
                raise WalkStalledError(self._producer.stall_timeout)
        finally:
            self.cancel()

    def _next(self):
        producer = self._producer
        while True:
            if producer.cancelled.is_set():
                return _DONE
            try:
                return producer.queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                # A stalled producer may have exited without delivering the marker
                if not self._thread.is_alive() and producer.queue.empty():
                    return _DONE


def walk(
    *paths: str,
    queue_size: int = DEFAULT_QUEUE_SIZE,
    stall_timeout: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
) -> PathWalker:
    """
    Start walking the given paths recursively, in their respective order.

    Returns immediately; the walk runs on a background thread and fills a
    bounded queue while the consumer iterates the returned walker.

    Args:
        *paths: Root paths (files or directories)
        queue_size: Maximum number of paths buffered ahead of the consumer
        stall_timeout: Seconds to wait on a consumer that stopped reading;
            iterating a walk that gave up raises WalkStalledError
        logger: Diagnostics sink

    Returns:
        Started PathWalker
    """
    return PathWalker(
        list(paths), queue_size=queue_size, stall_timeout=stall_timeout, logger=logger
    ).start()


__all__ = ["PathWalker", "walk", "DEFAULT_QUEUE_SIZE"]
