"""Tests for listen(): the event-listener adapter."""

import pytest

from bindfx import Binding, EventStream, listen


class _Connection:
    def __init__(self, listeners, listener):
        self._listeners = listeners
        self._listener = listener

    def disconnect(self):
        self._listeners.remove(self._listener)


class _Signal:
    """connect() returning an object with disconnect()."""

    def __init__(self):
        self.listeners = []

    def connect(self, listener):
        self.listeners.append(listener)
        return _Connection(self.listeners, listener)

    def fire(self, *args):
        for listener in list(self.listeners):
            listener(*args)


class _RobloxSignal:
    """Connect() returning an object with Disconnect()."""

    def __init__(self):
        self.listeners = []

    def Connect(self, listener):
        self.listeners.append(listener)
        signal = self

        class Connection:
            def Disconnect(self):
                signal.listeners.remove(listener)

        return Connection()


class TestListen:
    def test_connect_disconnect(self):
        signal = _Signal()
        received = []
        stop = listen(signal, received.append)
        signal.fire(1)
        stop()
        signal.fire(2)
        assert received == [1]

    def test_capitalised_connect(self):
        signal = _RobloxSignal()
        stop = listen(signal, lambda: None)
        assert len(signal.listeners) == 1
        stop()
        assert signal.listeners == []

    def test_subscribe_returning_function(self):
        stream = EventStream()
        received = []
        stop = listen(stream, received.append)
        stream.emit("x")
        stop()
        stream.emit("y")
        assert received == ["x"]

    def test_binding_is_an_event_source(self):
        b = Binding(0)
        received = []
        stop = listen(b, received.append)
        b.set(1)
        stop()
        b.set(2)
        assert received == [1]

    def test_dispose_is_idempotent(self):
        signal = _Signal()
        stop = listen(signal, lambda: None)
        stop()
        stop()  # would raise ValueError from list.remove if called twice

    def test_none_event(self):
        stop = listen(None, lambda: None)
        stop()

    def test_not_an_event(self):
        with pytest.raises(TypeError):
            listen(object(), lambda: None)

    def test_connection_without_disconnect(self):
        class BadSignal:
            def connect(self, listener):
                return object()

        with pytest.raises(TypeError):
            listen(BadSignal(), lambda: None)
