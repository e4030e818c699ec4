"""listen(): connect a listener to any host event source.

Host frameworks spell subscription differently: connect()/Connect() returning
a connection with disconnect()/Disconnect(), or subscribe() returning an
unsubscribe function. listen() accepts all of them and always hands back a
plain idempotent disposer.
"""

from __future__ import annotations

from typing import Callable

from bindfx.binding import Disposer

_CONNECT_METHODS = ("connect", "Connect", "subscribe")
_DISCONNECT_METHODS = ("disconnect", "Disconnect")


def _noop() -> None:
    pass


def _disposer_for(connection) -> Disposer:
    if callable(connection):
        return connection
    for name in _DISCONNECT_METHODS:
        method = getattr(connection, name, None)
        if callable(method):
            return method
    raise TypeError(f"cannot disconnect {connection!r}")


def listen(event, listener: Callable) -> Disposer:
    """Connect listener to event and return a function that disconnects it.

    event may be None, in which case nothing is connected.

    Usage:
        stream = EventStream()
        stop = listen(stream, print)
        stream.emit("hi")  # prints hi
        stop()
    """
    if event is None:
        return _noop
    for name in _CONNECT_METHODS:
        method = getattr(event, name, None)
        if callable(method):
            disconnect = _disposer_for(method(listener))
            break
    else:
        raise TypeError(f"{event!r} is not an event source")

    done = False

    def _dispose() -> None:
        nonlocal done
        if not done:
            done = True
            disconnect()

    return _dispose
