"""Bindings: reactive value containers.

A binding holds a current value that can be read synchronously and observed
for change. Three kinds exist:

- Binding: a writable source. Writing a different value propagates to every
  dependent before any subscriber runs.
- DerivedBinding: a cached pure function of one or more sources, computed
  eagerly at construction and recomputed whenever a source changes.
- ConstantBinding: a value that never changes. Mapping it evaluates once
  and subscribes to nothing.

Bindable is the capability marker. Code that needs to know whether something
is a binding checks isinstance(x, Bindable) rather than probing attributes.

Thread safety: call set_scheduler() once from the owner thread. After that,
any .set() from a background thread is auto-marshaled. Owner-thread .set()
remains synchronous. Without a scheduler, writes from other threads run on
the writing thread and are serialized by the propagation lock.
"""

from __future__ import annotations

import threading
import weakref
from abc import ABC, abstractmethod
from typing import Callable, Generic, Mapping, Sequence, TypeVar, overload

from bindfx import _tracking
from bindfx._tracking import begin_batch, end_batch, mark_changed

T = TypeVar("T")
U = TypeVar("U")

Disposer = Callable[[], None]

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global thread scheduler for cross-thread binding writes.

    Call once from the owner/UI thread:
        bindfx.set_scheduler(app.call_from_thread)

    After this, any Binding.set() (and any ThreadingTimers firing) from
    another thread is marshaled through the scheduler.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread()


def call_on_owner(fn: Callable[[], None]) -> None:
    """Run fn on the scheduler thread, or directly when no marshal is needed."""
    if _scheduler is not None and threading.current_thread() != _scheduler_thread:
        _scheduler(fn)
    else:
        fn()


def _noop() -> None:
    pass


class Bindable(ABC, Generic[T]):
    """Capability marker for reactive value containers."""

    __slots__ = ()

    @abstractmethod
    def get_value(self) -> T:
        """Read the current value."""

    @abstractmethod
    def map(self, fn: Callable[[T], U]) -> Bindable[U]:
        """Return a binding whose value is fn(this binding's value)."""

    @abstractmethod
    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Call callback(new_value) after each change. Returns a disposer."""


class _ReactiveNode(Bindable[T]):
    """Shared machinery for bindings that can change."""

    __slots__ = ("_value", "_observers", "_subscribers", "__weakref__")

    _depth = 0

    def __init__(self) -> None:
        # Dependents are weak: a derived binding lives as long as its holder.
        self._observers: weakref.WeakSet[DerivedBinding] = weakref.WeakSet()
        self._subscribers: list[Callable[[T], None]] = []

    def get_value(self) -> T:
        return self._value

    def map(self, fn: Callable[[T], U]) -> DerivedBinding[U]:
        return DerivedBinding((self,), fn)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        self._subscribers.append(callback)
        _tracking.live.add(self)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                return  # already removed
            if not self._subscribers:
                _tracking.live.discard(self)

        return _unsubscribe


class Binding(_ReactiveNode[T]):
    """A writable source binding."""

    __slots__ = ()

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def set(self, value: T) -> None:
        """Write a new value. Auto-marshals from background threads."""
        call_on_owner(lambda v=value: self._set_direct(v))

    def _set_direct(self, value: T) -> None:
        begin_batch()
        try:
            old = self._value
            if old is not value and old != value:
                self._value = value
                mark_changed(self)
        finally:
            end_batch()

    def __repr__(self) -> str:
        return f"Binding({self._value!r})"


class DerivedBinding(_ReactiveNode[T]):
    """A binding computed from source bindings by a pure function.

    fn receives the sources' values positionally. The value is computed once
    at construction; if fn raises there, no binding is created. Later
    failures leave the previous value in place and propagate to whoever
    triggered the update.
    """

    __slots__ = ("_sources", "_fn", "_depth")

    def __init__(self, sources: Sequence[Bindable], fn: Callable[..., T]) -> None:
        super().__init__()
        self._sources = tuple(sources)
        self._fn = fn
        with _tracking.lock:
            self._value = fn(*(source.get_value() for source in self._sources))
            self._depth = 1
            for source in self._sources:
                if isinstance(source, _ReactiveNode):
                    self._depth = max(self._depth, source._depth + 1)
                    source._observers.add(self)

    def _recompute(self) -> None:
        """Called by the flush when a source changed."""
        self._value = self._fn(*(source.get_value() for source in self._sources))
        mark_changed(self)

    def dispose(self) -> None:
        """Disconnect from all sources. The value freezes where it is."""
        for source in self._sources:
            if isinstance(source, _ReactiveNode):
                source._observers.discard(self)
        self._subscribers.clear()
        _tracking.live.discard(self)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", type(self._fn).__name__)
        return f"DerivedBinding({name}, {self._value!r})"


class ConstantBinding(Bindable[T]):
    """A binding whose value never changes."""

    __slots__ = ("_value", "__weakref__")

    def __init__(self, value: T) -> None:
        self._value = value

    def get_value(self) -> T:
        return self._value

    def map(self, fn: Callable[[T], U]) -> ConstantBinding[U]:
        return ConstantBinding(fn(self._value))

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        # Nothing will ever change, so nothing is registered.
        return _noop

    def __repr__(self) -> str:
        return f"ConstantBinding({self._value!r})"


def create_binding(value: T) -> tuple[Binding[T], Callable[[T], None]]:
    """Create a source binding and return it with its setter.

    Usage:
        size, set_size = create_binding(10)
        label = size.map(lambda s: f"{s}px")
        set_size(12)
        label.get_value()  # "12px"
    """
    binding = Binding(value)
    return binding, binding.set


@overload
def join_bindings(bindings: Mapping[str, Bindable]) -> Bindable[dict]: ...
@overload
def join_bindings(bindings: Sequence[Bindable]) -> Bindable[tuple]: ...
def join_bindings(bindings):
    """Join bindings into one whose value is the tuple (or dict) of theirs.

    The joined value is recomputed once per flush no matter how many of its
    sources changed. When every source is constant, the result is a
    ConstantBinding and nothing is subscribed.
    """
    if isinstance(bindings, Mapping):
        keys = tuple(bindings)
        sources = tuple(bindings[key] for key in keys)

        def combine(*values):
            return dict(zip(keys, values))
    else:
        sources = tuple(bindings)

        def combine(*values):
            return values

    for source in sources:
        if not isinstance(source, Bindable):
            raise TypeError(f"join_bindings() expects bindings, got {source!r}")

    if all(isinstance(source, ConstantBinding) for source in sources):
        return ConstantBinding(combine(*(source.get_value() for source in sources)))
    return DerivedBinding(sources, combine)
