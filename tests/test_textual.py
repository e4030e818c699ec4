"""Tests for bindfx.textual: Textual integration layer."""

import threading

import pytest
from textual.css.query import NoMatches

from bindfx import Binding, Debouncer
from bindfx import textual as btx


class _MockTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class _MockApp:
    """Minimal mock matching the Textual App interface btx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []
        self.timers = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)

    def set_timer(self, delay, callback):
        timer = _MockTimer(delay, callback)
        self.timers.append(timer)
        return timer


class TestBind:
    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        b = Binding(1)
        effects = []
        btx.bind(app, b, effects.append)
        b.set(2)
        assert effects == []

    def test_skips_during_pause(self):
        app = _MockApp()
        b = Binding(1)
        effects = []
        btx.bind(app, b, effects.append)
        with btx.pause(app):
            b.set(2)
        assert effects == []

    def test_fires_when_safe(self):
        app = _MockApp()
        b = Binding(1)
        effects = []
        btx.bind(app, b.map(lambda v: v * 10), effects.append)
        b.set(2)
        assert effects == [20]

    def test_fire_immediately(self):
        app = _MockApp()
        b = Binding(1)
        effects = []
        btx.bind(app, b, effects.append, fire_immediately=True)
        assert effects == [1]

    def test_catches_nomatch(self):
        """NoMatches from widget queries is ignored."""
        app = _MockApp()
        b = Binding(1)

        def _raise_nomatch(v):
            raise NoMatches("StatusFooter")

        dispose = btx.bind(app, b, _raise_nomatch)
        b.set(2)
        dispose()

    def test_propagates_real_errors(self):
        """Non-NoMatches exceptions propagate normally."""
        app = _MockApp()
        b = Binding(1)

        def _raise_value_error(v):
            raise ValueError("boom")

        btx.bind(app, b, _raise_value_error)
        with pytest.raises(ValueError, match="boom"):
            b.set(2)

    def test_dispose_stops_effect(self):
        app = _MockApp()
        b = Binding(1)
        effects = []
        dispose = btx.bind(app, b, effects.append)
        b.set(2)
        dispose()
        b.set(3)
        assert effects == [2]

    def test_thread_marshal(self):
        """Updates from a background thread use call_from_thread."""
        app = _MockApp()
        b = Binding(1)
        effects = []
        btx.bind(app, b, effects.append)

        t = threading.Thread(target=lambda: b.set(2))
        t.start()
        t.join()

        assert effects == [2]
        assert len(app._call_from_thread_log) >= 1


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert btx.is_safe(app)

        with pytest.raises(RuntimeError):
            with btx.pause(app):
                assert not btx.is_safe(app)
                raise RuntimeError("oops")

        assert btx.is_safe(app)

    def test_pause_does_not_mutate_app(self):
        """Pause state lives in the module, not on the app."""
        app = _MockApp()
        attrs_before = set(vars(app))
        with btx.pause(app):
            attrs_during = set(vars(app))
        assert attrs_before == attrs_during == set(vars(app))

    def test_multiple_apps_independent(self):
        app_a = _MockApp()
        app_b = _MockApp()
        with btx.pause(app_a):
            assert not btx.is_safe(app_a)
            assert btx.is_safe(app_b)


class TestTextualTimers:
    def test_schedules_on_app(self):
        app = _MockApp()
        timers = btx.TextualTimers(app)
        fired = []
        timers.call_later(0.5, lambda: fired.append(1))
        assert app.timers[0].delay == 0.5
        app.timers[0].callback()
        assert fired == [1]

    def test_cancel_stops_timer(self):
        app = _MockApp()
        handle = btx.TextualTimers(app).call_later(0.5, lambda: None)
        handle.cancel()
        assert app.timers[0].stopped

    def test_drives_debouncer(self):
        app = _MockApp()
        calls = []
        d = Debouncer(calls.append, wait=0.2, timers=btx.TextualTimers(app))
        d.run("a")
        d.run("b")
        assert len(app.timers) == 1
        d.flush()
        assert calls == ["b"]
        assert app.timers[0].stopped
