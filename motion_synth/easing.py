from __future__ import annotations

import math
from typing import Callable, Dict, Optional


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(value, max_value))


def linear(t: float) -> float:
    return clamp(t, 0.0, 1.0)


def ease_in_quad(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return t * t


def ease_out_quad(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return t * (2 - t)


def ease_in_out_quad(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    if t < 0.5:
        return 2 * t * t
    return -1 + (4 - 2 * t) * t


def ease_in_cubic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return t * t * t


def ease_out_cubic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    t -= 1
    return t * t * t + 1


def ease_in_out_cubic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    if t < 0.5:
        return 4 * t * t * t
    t -= 1
    return 4 * t * t * t + 1


def _tpmt(x: float) -> float:
    # 2^(-10x) rescaled so that tpmt(0) == 1 and tpmt(1) == 0
    return (math.pow(2, -10 * x) - 0.0009765625) * 1.0009775171065494


def ease_in_expo(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return _tpmt(1 - t)


def ease_out_expo(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1 - _tpmt(t)


def ease_in_out_expo(t: float) -> float:
    t = clamp(t, 0.0, 1.0) * 2
    if t <= 1:
        return _tpmt(1 - t) / 2
    return (2 - _tpmt(t - 1)) / 2


def ease_in_circle(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1 - math.sqrt(1 - t * t)


def ease_out_circle(t: float) -> float:
    t = clamp(t, 0.0, 1.0) - 1
    return math.sqrt(1 - t * t)


def ease_in_out_circle(t: float) -> float:
    t = clamp(t, 0.0, 1.0) * 2
    if t <= 1:
        return (1 - math.sqrt(1 - t * t)) / 2
    t -= 2
    return (math.sqrt(1 - t * t) + 1) / 2


BACK_OVERSHOOT = 1.70158


def ease_in_back(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    s = BACK_OVERSHOOT
    return t * t * (s * (t - 1) + t)


def ease_out_back(t: float) -> float:
    t = clamp(t, 0.0, 1.0) - 1
    s = BACK_OVERSHOOT
    return t * t * ((t + 1) * s + t) + 1


def ease_in_out_back(t: float) -> float:
    t = clamp(t, 0.0, 1.0) * 2
    s = BACK_OVERSHOOT
    if t < 1:
        return t * t * ((s + 1) * t - s) / 2
    t -= 2
    return (t * t * ((s + 1) * t + s) + 2) / 2


_ELASTIC_PERIOD = 0.3 / (2 * math.pi)
_ELASTIC_SHIFT = math.asin(1.0) * _ELASTIC_PERIOD


def ease_in_elastic(t: float) -> float:
    t = clamp(t, 0.0, 1.0) - 1
    return _tpmt(-t) * math.sin((_ELASTIC_SHIFT - t) / _ELASTIC_PERIOD)


def ease_out_elastic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1 - _tpmt(t) * math.sin((t + _ELASTIC_SHIFT) / _ELASTIC_PERIOD)


def ease_in_out_elastic(t: float) -> float:
    t = clamp(t, 0.0, 1.0) * 2 - 1
    if t < 0:
        return _tpmt(-t) * math.sin((_ELASTIC_SHIFT - t) / _ELASTIC_PERIOD) / 2
    return (2 - _tpmt(t) * math.sin((_ELASTIC_SHIFT + t) / _ELASTIC_PERIOD)) / 2


def ease_out_bounce(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    b0 = 121 / 16
    if t < 4 / 11:
        return b0 * t * t
    if t < 8 / 11:
        t -= 6 / 11
        return b0 * t * t + 3 / 4
    if t < 10 / 11:
        t -= 9 / 11
        return b0 * t * t + 15 / 16
    t -= 21 / 22
    return b0 * t * t + 63 / 64


def ease_in_bounce(t: float) -> float:
    return 1 - ease_out_bounce(1 - clamp(t, 0.0, 1.0))


def ease_in_out_bounce(t: float) -> float:
    t = clamp(t, 0.0, 1.0) * 2
    if t <= 1:
        return (1 - ease_out_bounce(1 - t)) / 2
    return (ease_out_bounce(t - 1) + 1) / 2


EASING_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "linear": linear,
    "easeInQuad": ease_in_quad,
    "easeOutQuad": ease_out_quad,
    "easeInOutQuad": ease_in_out_quad,
    "easeInCubic": ease_in_cubic,
    "easeOutCubic": ease_out_cubic,
    "easeInOutCubic": ease_in_out_cubic,
    "easeInExpo": ease_in_expo,
    "easeOutExpo": ease_out_expo,
    "easeInOutExpo": ease_in_out_expo,
    "easeInCircle": ease_in_circle,
    "easeOutCircle": ease_out_circle,
    "easeInOutCircle": ease_in_out_circle,
    "easeInBack": ease_in_back,
    "easeOutBack": ease_out_back,
    "easeInOutBack": ease_in_out_back,
    "easeInElastic": ease_in_elastic,
    "easeOutElastic": ease_out_elastic,
    "easeInOutElastic": ease_in_out_elastic,
    "easeInBounce": ease_in_bounce,
    "easeOutBounce": ease_out_bounce,
    "easeInOutBounce": ease_in_out_bounce,
}

DEFAULT_EASING = "linear"


def get_easing(name: Optional[str]) -> Callable[[float], float]:
    """Look up an easing curve by name, falling back to linear for unknown or missing names."""
    if name is None:
        return EASING_FUNCTIONS[DEFAULT_EASING]
    return EASING_FUNCTIONS.get(name, EASING_FUNCTIONS[DEFAULT_EASING])
