"""Numeric helpers for interpolation and transparency."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class Lerpable(Protocol):
    """A value that can interpolate toward another value of its type."""

    def lerp(self, to, alpha: float): ...


def lerp(a: float, b: float, alpha: float) -> float:
    """Linearly interpolate between a and b. alpha is not clamped."""
    return a + (b - a) * alpha


def remap(
    value: float,
    from_min: float,
    from_max: float,
    to_min: float,
    to_max: float,
) -> float:
    """Map value from [from_min, from_max] onto [to_min, to_max].

    The result is not clamped. A zero-width input range raises
    ZeroDivisionError.
    """
    return (value - from_min) * (to_max - to_min) / (from_max - from_min) + to_min


def blend(*transparencies: float) -> float:
    """Multiply transparencies together.

    Layering transparent things multiplies their opacities, so each
    transparency is inverted, the opacities are multiplied, and the product
    is inverted back. blend() with no arguments is fully opaque (0).
    """
    opacity = 1.0
    for transparency in transparencies:
        opacity *= 1 - transparency
    return 1 - opacity
