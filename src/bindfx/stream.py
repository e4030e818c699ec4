"""Event streams: discrete values pushed to listeners, no current value.

Bindings model state; streams model happenings such as keystrokes, clicks
and resize notifications. Operators (map, filter, debounce) each return a
downstream stream wired to this one. Disposing a stream disposes everything
downstream of it and unhooks it from its upstream. hold() is the bridge back
to state: it returns a Binding tracking the latest event.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from bindfx.binding import Binding, Disposer
from bindfx.debounce import Debouncer

T = TypeVar("T")
U = TypeVar("U")


class EventStream(Generic[T]):
    """A source of events. Call emit() to push, subscribe() to listen."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []
        self._downstream: list[EventStream] = []
        self._teardown: list[Disposer] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def emit(self, value: T) -> None:
        if self._disposed:
            return
        # Copy: a listener may unsubscribe itself.
        for listener in tuple(self._listeners):
            listener(value)

    def subscribe(self, listener: Callable[[T], None]) -> Disposer:
        """Call listener(value) for each event. Returns an idempotent disposer."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def map(self, fn: Callable[[T], U]) -> EventStream[U]:
        return self._derive(lambda out: lambda value: out.emit(fn(value)))

    def filter(self, predicate: Callable[[T], bool]) -> EventStream[T]:
        def relay(out: EventStream[T]) -> Callable[[T], None]:
            def forward(value: T) -> None:
                if predicate(value):
                    out.emit(value)

            return forward

        return self._derive(relay)

    def debounce(self, wait: float, **options) -> EventStream[T]:
        """Forward an event only once the stream has been quiet for wait.

        Takes the Debouncer keyword options (leading, trailing, max_wait,
        timers). A pending event is dropped when the result is disposed.
        """
        debouncer: Debouncer | None = None

        def relay(out: EventStream[T]) -> Callable[[T], None]:
            nonlocal debouncer
            debouncer = Debouncer(out.emit, wait=wait, **options)
            return debouncer.run

        out: EventStream[T] = self._derive(relay)
        out._teardown.append(debouncer.cancel)
        return out

    def hold(self, initial: T) -> Binding[T]:
        """A binding that starts at initial and follows each emitted value."""
        binding = Binding(initial)
        self.subscribe(binding.set)
        return binding

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._listeners.clear()
        while self._downstream:
            self._downstream.pop().dispose()
        while self._teardown:
            self._teardown.pop()()

    def _derive(self, relay: Callable[[EventStream], Callable[[T], None]]) -> EventStream:
        """A downstream stream fed by relay(out), torn down with this one."""
        out: EventStream = EventStream()
        forward = relay(out)
        self._downstream.append(out)

        def _detach() -> None:
            if out in self._downstream:
                self._downstream.remove(out)

        out._teardown.append(_detach)
        out._teardown.append(self.subscribe(forward))
        return out
