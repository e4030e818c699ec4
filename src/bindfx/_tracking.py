"""Propagation engine: the heart of bindfx.

Source writes mark their dependents dirty. Dirty derived bindings are queued
on a heap keyed by depth (sources are depth 0, a derived binding sits one
level above its deepest source), so every node recomputes after all of its
sources and at most once per flush.

Batching: writes inside `with batch()` or a @batched function accumulate and
flush once when the outermost scope exits, so a combiner never sees a tuple
where some sources are new and others are stale.

Subscribers are notified only after the whole graph has settled.

Threads: a batch holds the module lock from begin_batch() to the matching
end_batch(), so writes from different threads propagate one batch at a time.
Without set_scheduler(), ThreadingTimers callbacks run on the timer thread
and rely on this lock. For same-thread delivery install a scheduler or use
AsyncioTimers, ManualTimers or TextualTimers.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bindfx.binding import Bindable, DerivedBinding

logger = logging.getLogger("bindfx.tracking")

# Held for the whole of a batch, including its flush. Reentrant so nested
# batches and writes made by subscribers do not deadlock.
lock = threading.RLock()

# Batch depth counter. When > 0, flushing is deferred.
_batch_depth: int = 0

# Dirty derived bindings: (depth, seq, node). seq keeps heap ordering total.
_queue: list[tuple[int, int, DerivedBinding]] = []
_queued: set[DerivedBinding] = set()
_seq = itertools.count()

# Bindings whose value changed and whose subscribers have not yet been called.
_changed: dict[Bindable, None] = {}

# Bindings with live subscribers. Keeps them alive while sources only hold
# weak references to their dependents.
live: set[Bindable] = set()


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    lock.acquire()
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush."""
    global _batch_depth
    try:
        if _batch_depth > 1:
            _batch_depth -= 1
            return
        # Hold depth at 1 while flushing: writes made by subscribers queue up
        # and are drained by the same loop instead of recursing.
        try:
            _flush()
        finally:
            _batch_depth -= 1
    finally:
        lock.release()


def mark_changed(node: Bindable) -> None:
    """Record that node's value changed and queue its dependents."""
    _changed[node] = None
    for observer in list(node._observers):
        if observer not in _queued:
            _queued.add(observer)
            heapq.heappush(_queue, (observer._depth, next(_seq), observer))


def _flush() -> None:
    error: BaseException | None = None
    while _queue or _changed:
        while _queue:
            _, _, node = heapq.heappop(_queue)
            _queued.discard(node)
            try:
                node._recompute()
            except Exception as exc:
                logger.debug("recompute of %r failed", node, exc_info=True)
                if error is None:
                    error = exc

        # Snapshot and clear: subscribers may write and mark new changes.
        batch = list(_changed)
        _changed.clear()
        for node in batch:
            for callback in list(node._subscribers):
                try:
                    callback(node._value)
                except Exception as exc:
                    logger.debug("subscriber of %r failed", node, exc_info=True)
                    if error is None:
                        error = exc
    if error is not None:
        raise error


def get_pending_count() -> int:
    """Number of derived bindings waiting to recompute. Useful for testing."""
    return len(_queue)
