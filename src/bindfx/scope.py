"""Scope: owner of cleanup actions for one component/session lifetime.

A Scope collects whatever must be torn down together: debouncers to cancel,
subscriptions to drop, derived bindings to detach. dispose() (or leaving a
`with` block) runs them newest-first, exactly once. Latest is the companion
holder for values such closures should always read fresh.
"""

from __future__ import annotations

import functools
import operator
from typing import Callable, Generic, TypeVar

from bindfx.binding import Bindable, DerivedBinding, Disposer
from bindfx.compose import map_binding
from bindfx.debounce import Debouncer
from bindfx.events import listen

T = TypeVar("T")
R = TypeVar("R")


class Scope:
    """Teardown owner. Use as a context manager or call dispose()."""

    def __init__(self) -> None:
        self._cleanups: list[Disposer] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on_dispose(self, fn: Disposer) -> Disposer:
        """Run fn at teardown. Returns fn, so it also works as a decorator."""
        self._check()
        self._cleanups.append(fn)
        return fn

    def add(self, resource: T) -> T:
        """Own resource: a callable, or anything with dispose() or cancel()."""
        for name in ("dispose", "cancel"):
            method = getattr(resource, name, None)
            if callable(method):
                self.on_dispose(method)
                return resource
        if callable(resource):
            self.on_dispose(resource)
            return resource
        raise TypeError(f"don't know how to dispose {resource!r}")

    def debounce(self, callback: Callable[..., R], **options) -> Debouncer:
        """A Debouncer that is cancelled when this scope is disposed."""
        return self.add(Debouncer(callback, **options))

    def subscribe(self, source, callback: Callable) -> Disposer:
        """Listen to a binding or event source until this scope is disposed."""
        return self.on_dispose(listen(source, callback))

    def map(self, value, fn: Callable) -> Bindable:
        """map_binding() whose result is detached at teardown."""
        result = map_binding(value, fn)
        if isinstance(result, DerivedBinding):
            self.add(result)
        return result

    def dispose(self) -> None:
        """Run every cleanup, newest first. Re-raises the first failure."""
        if self._disposed:
            return
        self._disposed = True
        error: BaseException | None = None
        while self._cleanups:
            cleanup = self._cleanups.pop()
            try:
                cleanup()
            except Exception as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error

    def _check(self) -> None:
        if self._disposed:
            raise RuntimeError("scope is already disposed")

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


def skip_first(fn: Callable[..., R]) -> Callable[..., R | None]:
    """Wrap fn so that its first call is ignored.

    Useful for effects that should react to updates but not to the value
    they are primed with, e.g. an effect that is also called once at setup.
    """
    called = False

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        nonlocal called
        if not called:
            called = True
            return None
        return fn(*args, **kwargs)

    return wrapper


class Latest(Generic[T]):
    """A mutable holder for the most recently supplied value.

    update(value) replaces current unless predicate(current, value) says
    the two are the same; the default predicate is identity. Handy for
    long-lived closures (a debounced callback, a subscription) that must
    read whatever the owner last handed in without being rebuilt.

        handler = Latest(on_save)
        save = scope.debounce(lambda text: handler.current(text), wait=0.5)
        ...
        handler.update(new_on_save)
    """

    __slots__ = ("current", "_predicate")

    def __init__(self, value: T, predicate: Callable[[T, T], bool] = operator.is_) -> None:
        self.current = value
        self._predicate = predicate

    def update(self, value: T) -> bool:
        """Store value unless it matches current. Returns True if stored."""
        if self._predicate(self.current, value):
            return False
        self.current = value
        return True

    def __repr__(self) -> str:
        return f"Latest({self.current!r})"
