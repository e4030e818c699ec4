"""Textual integration for bindfx. Opt-in, requires textual.

Guard + NoMatches + thread-marshal are enforced here, not at callsites.
Textual coupling is isolated in this module; core bindfx stays agnostic.
_paused_apps has a single owner (this module): an id is present exactly
while inside a pause() context.
"""

import logging
import threading
import time
from contextlib import contextmanager

from textual.css.query import NoMatches

from bindfx.timers import Timers

logger = logging.getLogger("bindfx.textual")

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, binding, effect, *, fire_immediately=False):
    """Run effect(value) whenever binding changes, safely against Textual widgets.

    Guards against firing during pause/not-running, ignores NoMatches from
    widget queries, and marshals cross-thread updates via call_from_thread.
    Returns the disposer from binding.subscribe().
    """
    _main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect(value)
        except NoMatches:
            logger.debug("effect skipped, widget not mounted: %r", effect)

    dispose = binding.subscribe(_guarded)
    if fire_immediately:
        _guarded(binding.get_value())
    return dispose


class TextualTimers(Timers):
    """Timers driven by the app's own event loop (App.set_timer)."""

    def __init__(self, app) -> None:
        self.app = app

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay, fn):
        return _StopHandle(self.app.set_timer(delay, fn))


class _StopHandle:
    """Adapts a Textual Timer (stop()) to the cancel() handle interface."""

    __slots__ = ("_timer",)

    def __init__(self, timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()
