"""
Statistics primitives shared by every metric calculator.

Zero, NaN and infinite samples are indistinguishable from "not recorded" in
wearable telemetry, so normalize() folds them all into None.
"""

import math
from typing import Iterable, Optional, Sequence, Tuple

Point = Tuple[float, float]


def normalize(value: Optional[float]) -> Optional[float]:
    """Return value unchanged, or None if it is absent, zero, NaN or infinite."""
    if value is None:
        return None
    value = float(value)
    if value == 0 or math.isnan(value) or math.isinf(value):
        return None
    return value


def valid_values(values: Iterable[Optional[float]]) -> list:
    """Normalize a series and drop the gaps."""
    return [v for v in (normalize(x) for x in values) if v is not None]


def average(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def standard_deviation(values: Sequence[float]) -> Optional[float]:
    """Population standard deviation (divides by N); None below two values."""
    n = len(values)
    if n < 2:
        return None
    mean = sum(values) / n
    variance = sum((x - mean) ** 2 for x in values) / n
    return math.sqrt(variance)


def interpolate(value: float, low: Point, mid: Point, high: Point) -> float:
    """
    Three-point piecewise-linear curve.

    Returns low[1] at or below low[0], high[1] at or above high[0], and
    interpolates linearly inside whichever segment holds value. Both
    segments evaluate to mid[1] at mid[0], so the curve is continuous there.

    Knot x-coordinates must be strictly ascending; a descending response
    is expressed through the y-coordinates instead.
    """
    x0, y0 = low
    x1, y1 = mid
    x2, y2 = high
    if not (x0 < x1 < x2):
        raise ValueError(
            f"Interpolation knots must be strictly ascending, got {x0}, {x1}, {x2}"
        )

    if value <= x0:
        return y0
    if value >= x2:
        return y2
    if value <= x1:
        return y0 + (value - x0) / (x1 - x0) * (y1 - y0)
    return y1 + (value - x1) / (x2 - x1) * (y2 - y1)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def weighted_average(components: Iterable[Tuple[Optional[float], float]]) -> Optional[float]:
    """
    Weighted mean over the components that have a value.

    Missing components are dropped and the result is re-normalized by the
    weights actually used. None when nothing contributed.
    """
    total = 0.0
    weight_used = 0.0
    for value, weight in components:
        if value is None:
            continue
        total += value * weight
        weight_used += weight
    if weight_used <= 0:
        return None
    return total / weight_used
