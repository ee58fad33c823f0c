"""Tap deviation estimates from judgement counts.

Hit errors are modelled as a zero-mean normal distribution.  The fraction
of eligible circles judged "great" pins down the standard deviation through
``P(|X| < window) = erf(window / (sqrt(2) * sigma))``.  One extra phantom
non-great hit is added to the denominator so a perfect play still yields a
finite, positive deviation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from scipy import special

from ppcore.equations.hit_probability import SQRT2

__all__ = [
    "DeviationKind",
    "DeviationEstimate",
    "great_hit_window",
    "estimate_deviation",
    "circle_deviation",
    "speed_deviation",
]


class DeviationKind(str, Enum):
    UNDEFINED = "undefined"
    INFINITE = "infinite"
    VALUE = "value"


@dataclass(frozen=True, slots=True)
class DeviationEstimate:
    """Outcome of a deviation estimate.

    ``UNDEFINED`` means there was nothing to measure and callers skip any
    deviation-based scaling.  ``INFINITE`` means no great hit landed and the
    dependent sub-score collapses to zero.
    """

    kind: DeviationKind
    value: float = math.nan

    @classmethod
    def undefined(cls) -> "DeviationEstimate":
        return cls(DeviationKind.UNDEFINED)

    @classmethod
    def infinite(cls) -> "DeviationEstimate":
        return cls(DeviationKind.INFINITE, math.inf)

    @classmethod
    def of(cls, value: float) -> "DeviationEstimate":
        if not (math.isfinite(value) and value > 0.0):
            raise ValueError("deviation must be a positive finite number")
        return cls(DeviationKind.VALUE, float(value))

    @property
    def is_undefined(self) -> bool:
        return self.kind is DeviationKind.UNDEFINED

    @property
    def is_infinite(self) -> bool:
        return self.kind is DeviationKind.INFINITE

    @property
    def is_value(self) -> bool:
        return self.kind is DeviationKind.VALUE

    @property
    def unstable_rate(self) -> Optional[float]:
        """Ten times the deviation; ``None`` when undefined."""

        if self.is_undefined:
            return None
        return 10.0 * self.value

    def scale(self, factor: Callable[[float], float]) -> float:
        """Apply ``factor`` to a defined deviation.

        Undefined estimates leave a value untouched (1.0) and infinite ones
        zero it out.
        """

        if self.is_undefined:
            return 1.0
        if self.is_infinite:
            return 0.0
        return float(factor(self.value))


def great_hit_window(overall_difficulty: float) -> float:
    """Half-width in milliseconds of the "great" judgement window."""

    return 80.0 - 6.0 * float(overall_difficulty)


def estimate_deviation(great_hits: float, eligible_hits: float, window: float) -> DeviationEstimate:
    """Deviation implied by ``great_hits`` out of ``eligible_hits``."""

    if eligible_hits <= 0.0 or window <= 0.0:
        return DeviationEstimate.undefined()
    if great_hits <= 0.0:
        return DeviationEstimate.infinite()
    eligible = float(eligible_hits)
    probability = min(float(great_hits), eligible) / (eligible + 1.0)
    return DeviationEstimate.of(window / (SQRT2 * float(special.erfinv(probability))))


def circle_deviation(
    *,
    great: int,
    circle_count: int,
    slider_count: int,
    spinner_count: int,
    overall_difficulty: float,
) -> DeviationEstimate:
    """Deviation over hit circles.

    Greats are pessimistically attributed to sliders and spinners first.
    Every circle stays eligible, so a missed circle counts as a non-great
    hit and can only widen the estimate.
    """

    if circle_count <= 0:
        return DeviationEstimate.undefined()
    circle_greats = max(0, great - slider_count - spinner_count)
    return estimate_deviation(
        circle_greats, circle_count, great_hit_window(overall_difficulty)
    )


def speed_deviation(
    *,
    great: int,
    circle_count: int,
    slider_count: int,
    spinner_count: int,
    speed_note_count: float,
    overall_difficulty: float,
) -> DeviationEstimate:
    """Deviation restricted to the circles that carry the speed rating."""

    speed_circles = min(float(speed_note_count), float(circle_count))
    if speed_circles <= 0.0:
        return DeviationEstimate.undefined()
    ignored_circles = circle_count - speed_circles
    speed_greats = max(0.0, great - ignored_circles - slider_count - spinner_count)
    return estimate_deviation(
        speed_greats, speed_circles, great_hit_window(overall_difficulty)
    )
