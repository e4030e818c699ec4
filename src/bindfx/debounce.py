"""Debounced invocation: coalesce bursts of calls into one delayed call.

A Debouncer is Idle until run() is called, then Pending while a timer is
armed. Every run() inside the wait window pushes the deadline back and
replaces the pending arguments; when the window passes quietly the callback
fires once with the latest arguments and the Debouncer is Idle again.

Options:
- wait: seconds of quiet required before the trailing call.
- leading: call immediately on the first run() of a burst.
- trailing: call after the burst goes quiet (default).
- max_wait: upper bound on how long a burst can postpone the call,
  measured from its first run().

run() always returns the result of the last completed invocation, so callers
can read results synchronously even while a new call is still pending.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, Generic, ParamSpec, TypeVar

from bindfx import _tracking
from bindfx.binding import Binding
from bindfx.timers import ThreadingTimers, Timers

logger = logging.getLogger("bindfx.debounce")

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T")

_default_timers = ThreadingTimers()


class DebounceOptionsError(ValueError):
    """Debounce options outside their valid domain."""


@dataclass(frozen=True)
class DebounceOptions:
    wait: float = 0.0
    leading: bool = False
    trailing: bool = True
    max_wait: float | None = None

    def __post_init__(self) -> None:
        if self.wait < 0:
            raise DebounceOptionsError(f"wait must be >= 0, got {self.wait!r}")
        if self.max_wait is not None:
            if self.max_wait < 0:
                raise DebounceOptionsError(f"max_wait must be >= 0, got {self.max_wait!r}")
            if self.max_wait < self.wait:
                raise DebounceOptionsError(
                    f"max_wait ({self.max_wait!r}) must not be shorter than wait ({self.wait!r})"
                )
        if not self.leading and not self.trailing:
            raise DebounceOptionsError("at least one of leading or trailing must be enabled")


class Debouncer(Generic[P, R]):
    """Wraps a callback and delays its invocation.

    The callback attribute may be reassigned at any time; the next invocation
    uses whatever callback is current. The owner must cancel() the Debouncer
    when it is torn down, or a pending call fires afterwards.
    """

    def __init__(
        self,
        callback: Callable[P, R],
        *,
        wait: float = 0.0,
        leading: bool = False,
        trailing: bool = True,
        max_wait: float | None = None,
        timers: Timers | None = None,
    ) -> None:
        functools.update_wrapper(self, callback)
        self.options = DebounceOptions(wait, leading, trailing, max_wait)
        self.callback = callback
        self._timers = timers if timers is not None else _default_timers
        # The propagation lock: a callback writing bindings from a timer thread
        # must not take locks in the opposite order to a batch calling run().
        self._lock = _tracking.lock
        self._attr_name: str | None = None
        self._timer = None
        self._token: object | None = None
        self._pending_call: tuple[tuple, dict] | None = None
        self._last_call_time: float | None = None
        self._last_invoke_time = 0.0
        self._result: R | None = None

    @property
    def result(self) -> R | None:
        """Return value of the last completed invocation."""
        return self._result

    def run(self, *args: P.args, **kwargs: P.kwargs) -> R | None:
        """Schedule a call with these arguments. Returns the last result."""
        with self._lock:
            time = self._timers.now()
            invoking = self._should_invoke(time)
            self._pending_call = (args, kwargs)
            self._last_call_time = time

            if invoking:
                if self._timer is None:
                    return self._leading_edge(time)
                if self.options.max_wait is not None:
                    # Calls arriving in a tight loop past max_wait.
                    self._start_timer(self.options.wait)
                    return self._invoke(time)
            if self._timer is None:
                self._start_timer(self.options.wait)
            return self._result

    __call__ = run

    def __set_name__(self, owner: type, name: str) -> None:
        self._attr_name = name

    def __get__(self, obj, objtype=None):
        """Decorated method: each instance gets its own bound Debouncer.

        The bound Debouncer is cached on the instance, so repeated attribute
        access shares one timer and cancel() on it affects only that owner.
        """
        if obj is None:
            return self
        bound = Debouncer(
            self.callback.__get__(obj, objtype),
            wait=self.options.wait,
            leading=self.options.leading,
            trailing=self.options.trailing,
            max_wait=self.options.max_wait,
            timers=self._timers,
        )
        try:
            namespace = obj.__dict__
        except AttributeError:
            raise TypeError(
                f"@debounce methods need an instance __dict__, {type(obj).__name__} has none"
            ) from None
        namespace[self._attr_name or self.__name__] = bound
        return bound

    def cancel(self) -> None:
        """Drop any pending call. Safe to call when Idle."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                logger.debug("cancelled pending call to %r", self.callback)
            self._last_invoke_time = 0.0
            self._pending_call = None
            self._last_call_time = None
            self._timer = None
            self._token = None

    def flush(self) -> R | None:
        """Invoke a pending call now. Returns the last result."""
        with self._lock:
            if self._timer is None:
                return self._result
            self._timer.cancel()
            return self._trailing_edge(self._timers.now())

    def pending(self) -> bool:
        """Whether a call is scheduled and has not yet fired."""
        return self._timer is not None

    # --- state machine ---

    def _should_invoke(self, time: float) -> bool:
        if self._last_call_time is None:
            return True
        since_call = time - self._last_call_time
        since_invoke = time - self._last_invoke_time
        return (
            since_call >= self.options.wait
            or since_call < 0  # clock went backwards
            or (self.options.max_wait is not None and since_invoke >= self.options.max_wait)
        )

    def _remaining_wait(self, time: float) -> float:
        waiting = self.options.wait - (time - self._last_call_time)
        if self.options.max_wait is None:
            return waiting
        return min(waiting, self.options.max_wait - (time - self._last_invoke_time))

    def _start_timer(self, delay: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
        token = object()
        self._token = token
        self._timer = self._timers.call_later(delay, lambda: self._timer_expired(token))

    def _timer_expired(self, token: object) -> None:
        with self._lock:
            # A timer cancelled while already firing on another thread.
            if token is not self._token:
                return
            self._timer = None
            time = self._timers.now()
            if self._should_invoke(time):
                self._trailing_edge(time)
            else:
                self._start_timer(self._remaining_wait(time))

    def _leading_edge(self, time: float) -> R | None:
        self._last_invoke_time = time
        self._start_timer(self.options.wait)
        if self.options.leading:
            return self._invoke(time)
        return self._result

    def _trailing_edge(self, time: float) -> R | None:
        self._timer = None
        self._token = None
        if self.options.trailing and self._pending_call is not None:
            return self._invoke(time)
        self._pending_call = None
        return self._result

    def _invoke(self, time: float) -> R | None:
        args, kwargs = self._pending_call
        self._pending_call = None
        self._last_invoke_time = time
        logger.debug("invoking %r", self.callback)
        self._result = self.callback(*args, **kwargs)
        return self._result

    def __repr__(self) -> str:
        state = "pending" if self.pending() else "idle"
        name = getattr(self.callback, "__name__", type(self.callback).__name__)
        return f"Debouncer({name}, {state})"


def debounce(fn: Callable[P, R] | None = None, /, **options) -> Debouncer[P, R]:
    """Decorator/factory to create a Debouncer from a function.

    Usage:
        @debounce(wait=0.25)
        def save(text):
            ...

        save("a")
        save("ab")   # only "ab" is saved, 0.25s after this call
        save.flush() # ...or right now
    """
    if fn is None:
        return lambda f: Debouncer(f, **options)
    return Debouncer(fn, **options)


def debounce_state(initial: T, **options) -> tuple[Binding[T], Debouncer]:
    """A state binding whose setter is debounced.

    The setter accepts a value or an updater fn(previous) -> value. Only the
    last one supplied in a burst is applied, against the value current when
    the burst settles, so the binding changes once per settled call.

    Usage:
        query, set_query = debounce_state("", wait=0.3)
        set_query("c")
        set_query("ca")
        set_query("cat")
        # 0.3s later: query.get_value() == "cat"
    """
    state = Binding(initial)

    def set_state(action) -> None:
        state.set(action(state.get_value()) if callable(action) else action)

    return state, Debouncer(set_state, **options)
