"""Grouped binding writes.

A layout pass that sets x, y and scale one at a time would otherwise push
three rounds of recomputation through every dependent, and the first two
rounds would combine a new x with an old y. Inside batch() the writes land
immediately, but dependents and subscribers wait until the outermost batch
closes and then run once against the final values.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from bindfx._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def batch() -> Iterator[None]:
    """Defer propagation of every write made inside the block.

        origin, set_origin = create_binding((0, 0))
        zoom, set_zoom = create_binding(1.0)
        viewport = compose_bindings(origin, zoom, make_viewport)

        with batch():
            set_origin((120, 40))
            set_zoom(2.0)
        # make_viewport ran once, with both new values

    Reads inside the block see written sources immediately; derived values
    catch up on exit. Batches nest, only the outermost one flushes.
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def batched(fn: Callable[P, R]) -> Callable[P, R]:
    """Run every call of fn inside batch()."""

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with batch():
            return fn(*args, **kwargs)

    return wrapper
