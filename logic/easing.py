"""logic/easing.py — Tween curves.  Each maps t in [0, 1] to [0, 1]."""

from __future__ import annotations
import math


def linear(t: float) -> float:
    return t


def power1_out(t: float) -> float:
    return 1.0 - (1.0 - t) ** 2


def power2_out(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


def sine_in_out(t: float) -> float:
    return -(math.cos(math.pi * t) - 1.0) / 2.0


def expo_in_out(t: float) -> float:
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    if t < 0.5:
        return 2.0 ** (20.0 * t - 10.0) / 2.0
    return (2.0 - 2.0 ** (-20.0 * t + 10.0)) / 2.0


EASINGS = {
    "linear": linear,
    "power1.out": power1_out,
    "power2.out": power2_out,
    "sine.inOut": sine_in_out,
    "expo.inOut": expo_in_out,
}


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t
