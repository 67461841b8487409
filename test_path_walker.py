"""
Path Walker Tests
=================

Walk order, determinism, unreadable roots and cancellation of the
background walk.
"""

import gc
import logging
import os
import threading
import time

import pytest

from cfgwalk.config.exceptions import WalkStalledError
from cfgwalk.config.path_walker import PathWalker, walk


def make_tree(root, files):
    """Create empty files (and their parent directories) under root."""
    for rel in files:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
    return root


@pytest.fixture
def two_roots(tmp_path):
    make_tree(tmp_path, ["A/a1.yaml", "A/sub/a2.yaml", "B/b1.yaml"])
    return tmp_path / "A", tmp_path / "B"


def test_preorder_depth_first_in_root_order(two_roots):
    a, b = two_roots

    paths = list(walk(str(a), str(b)))

    assert paths == [
        str(a / "a1.yaml"),
        str(a / "sub" / "a2.yaml"),
        str(b / "b1.yaml"),
    ]


def test_subdirectory_visited_before_later_siblings(tmp_path):
    make_tree(tmp_path, ["a.txt", "m/x.txt", "m/deeper/y.txt", "z.txt"])

    paths = [os.path.relpath(p, tmp_path) for p in walk(tmp_path)]

    assert paths == [
        "a.txt",
        os.path.join("m", "deeper", "y.txt"),
        os.path.join("m", "x.txt"),
        "z.txt",
    ]


def test_walk_is_deterministic(tmp_path):
    make_tree(tmp_path, [f"d{i}/f{j}.yaml" for i in range(5) for j in range(5)])

    assert list(walk(tmp_path)) == list(walk(tmp_path))


def test_directories_are_never_emitted(tmp_path):
    make_tree(tmp_path, ["one/two/three/leaf.json"])
    (tmp_path / "empty").mkdir()

    assert list(walk(tmp_path)) == [str(tmp_path / "one" / "two" / "three" / "leaf.json")]


def test_paths_are_absolute(tmp_path, monkeypatch):
    make_tree(tmp_path, ["conf/app.yaml"])
    monkeypatch.chdir(tmp_path)

    paths = list(walk("conf"))

    assert paths == [str(tmp_path / "conf" / "app.yaml")]
    assert all(os.path.isabs(p) for p in paths)


def test_file_root_is_emitted_as_itself(two_roots):
    a, b = two_roots

    assert list(walk(str(b / "b1.yaml"), str(a / "a1.yaml"))) == [
        str(b / "b1.yaml"),
        str(a / "a1.yaml"),
    ]


def test_missing_root_contributes_nothing(two_roots, tmp_path, caplog):
    a, b = two_roots
    missing = tmp_path / "does-not-exist"

    with caplog.at_level(logging.ERROR):
        paths = list(walk(str(missing), str(b)))

    assert paths == [str(b / "b1.yaml")]
    assert any("Could not read path" in r.message for r in caplog.records)


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permission bits are not enforced for root",
)
def test_unreadable_directory_is_skipped(tmp_path):
    make_tree(tmp_path, ["a/1.yaml", "locked/secret.yaml", "z/2.yaml"])
    locked = tmp_path / "locked"
    locked.chmod(0)
    try:
        paths = list(walk(tmp_path))
    finally:
        locked.chmod(0o755)

    assert paths == [str(tmp_path / "a" / "1.yaml"), str(tmp_path / "z" / "2.yaml")]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_symlinked_directory_is_not_descended(tmp_path):
    make_tree(tmp_path, ["real/conf.yaml"])
    os.symlink(tmp_path / "real", tmp_path / "zlink")

    paths = list(walk(tmp_path))

    assert paths == [str(tmp_path / "real" / "conf.yaml"), str(tmp_path / "zlink")]


def test_injected_logger_receives_diagnostics(tmp_path, caplog):
    custom = logging.getLogger("tests.walker")

    with caplog.at_level(logging.DEBUG, logger="tests.walker"):
        list(walk(str(tmp_path / "missing"), logger=custom))

    assert [r.name for r in caplog.records] == ["tests.walker"]


def test_walker_is_single_pass(two_roots):
    walker = walk(*two_roots)
    list(walker)

    with pytest.raises(RuntimeError):
        iter(walker)


def test_queue_size_must_be_positive():
    with pytest.raises(ValueError):
        PathWalker([], queue_size=0)


# ============================================================================
# Cancellation and liveness
# ============================================================================

@pytest.fixture
def large_tree(tmp_path):
    return make_tree(tmp_path, [f"d{i:02d}/f{j:03d}.yaml" for i in range(20) for j in range(50)])


def test_cancel_stops_walk_promptly(large_tree):
    walker = walk(large_tree, queue_size=5)

    start = time.monotonic()
    walker.cancel()

    assert walker.join(timeout=5)
    assert time.monotonic() - start < 5
    assert walker.cancelled
    assert list(walker) == []


def test_cancel_after_partial_consumption(large_tree):
    walker = walk(large_tree, queue_size=5)
    it = iter(walker)
    first = [next(it) for _ in range(3)]

    walker.cancel()

    assert len(first) == 3
    assert walker.join(timeout=5)
    assert list(it) == []


def test_breaking_out_of_iteration_cancels(large_tree):
    walker = walk(large_tree, queue_size=5)

    for _ in walker:
        break

    assert walker.cancelled
    assert walker.join(timeout=5)


def test_abandoned_iterator_cancels_on_close(large_tree):
    walker = walk(large_tree, queue_size=5)
    it = iter(walker)
    next(it)

    it.close()

    assert walker.join(timeout=5)


def test_cancel_is_idempotent(large_tree):
    walker = walk(large_tree, queue_size=5)

    walker.cancel()
    walker.cancel()

    assert walker.join(timeout=5)


def test_stall_timeout_releases_producer_when_consumer_never_reads(large_tree):
    walker = walk(large_tree, queue_size=1, stall_timeout=0.2)

    assert walker.join(timeout=5)
    assert not walker.cancelled


def test_walk_without_cancel_finishes_on_exhaustion(two_roots):
    walker = walk(*two_roots)

    assert len(list(walker)) == 3
    assert walker.join(timeout=5)


def test_iterating_a_stalled_walk_raises(large_tree):
    walker = walk(large_tree, queue_size=1, stall_timeout=0.1)
    assert walker.join(timeout=5)

    with pytest.raises(WalkStalledError):
        list(walker)

    assert walker.stalled


def test_dropping_an_unread_walker_stops_its_thread(large_tree):
    before = set(threading.enumerate())
    walker = walk(large_tree, queue_size=5)
    (thread,) = [t for t in threading.enumerate()
                 if t not in before and t.name == "cfgwalk-walker"]

    del walker
    gc.collect()
    thread.join(timeout=5)

    assert not thread.is_alive()
