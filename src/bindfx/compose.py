"""Composition over possibly-reactive values.

Anything accepted here may be a plain value or a binding. Plain values are
lifted to constants, so callers never branch on which one they hold, and
composing nothing but constants produces a constant without subscribing to
anything.
"""

from __future__ import annotations

from numbers import Real
from typing import Any, Callable, TypeVar

from bindfx.binding import Bindable, ConstantBinding, join_bindings
from bindfx.numeric import lerp

T = TypeVar("T")
U = TypeVar("U")

MaybeBinding = Bindable[T] | T


def is_binding(value: object) -> bool:
    """Whether value is a binding (carries the Bindable marker)."""
    return isinstance(value, Bindable)


def to_binding(value: MaybeBinding[T]) -> Bindable[T]:
    """Return value as-is if it is a binding, else a constant holding it."""
    if isinstance(value, Bindable):
        return value
    return ConstantBinding(value)


def map_binding(value: MaybeBinding[T], fn: Callable[[T], U]) -> Bindable[U]:
    """Map a binding, or a plain value, through fn.

    A binding yields a derived binding that tracks it. A plain value is
    passed to fn once and the result wrapped as a constant.
    """
    if isinstance(value, Bindable):
        return value.map(fn)
    return ConstantBinding(fn(value))


def compose_bindings(*args: Any) -> Bindable:
    """Compose bindings and values into a single binding.

    The last positional argument is the combiner. It receives the current
    values of the other arguments, in order, and is called again whenever
    any of the bindings among them change.

    Usage:
        count, set_count = create_binding(4)
        total = compose_bindings(3, count, lambda a, b: a + b)
        total.get_value()  # 7
        set_count(10)
        total.get_value()  # 13
    """
    if not args or not callable(args[-1]):
        raise TypeError("compose_bindings() requires a combiner as its last argument")
    *values, combiner = args
    joined = join_bindings([to_binding(value) for value in values])
    return joined.map(lambda current: combiner(*current))


def lerp_binding(alpha: MaybeBinding[float], start: T, stop: T) -> Bindable[T]:
    """Return a binding that interpolates from start to stop by alpha.

    Numbers use linear interpolation; anything else must implement
    Lerpable (start.lerp(stop, alpha)).
    """
    if isinstance(start, Real):
        return map_binding(alpha, lambda a: lerp(start, stop, a))
    return map_binding(alpha, lambda a: start.lerp(stop, a))
