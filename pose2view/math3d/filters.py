"""Scalar clamping, interpolation and smoothing helpers."""

from __future__ import annotations


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b; t is clamped to [0, 1]."""
    return a + (b - a) * clamp(t, 0.0, 1.0)


def smooth_value(current: float, previous: float, smoothing: float = 0.7) -> float:
    """Exponential smoothing step.

    smoothing:
      Weight kept from ``previous`` in [0, 1]. Higher is smoother.
    """
    return lerp(previous, current, 1.0 - smoothing)


def soft_clamp(value: float, lo: float, hi: float, damping: float) -> float:
    """Attenuate, rather than clip, the part of value outside [lo, hi].

    The excess beyond the violated bound is scaled by ``damping``, so the
    result may still lie outside the range.
    """
    if value < lo:
        return lo + (value - lo) * damping
    if value > hi:
        return hi + (value - hi) * damping
    return value
