"""Per-object difficulty evaluators feeding the skill strategies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, Union

from ppcore.equations.rootfinding import find_root
from ppcore.skills.interfaces import SupportsTimedFeature

__all__ = [
    "AimEvaluator",
    "FlashlightEvaluator",
    "SpeedEvaluator",
    "Evaluator",
    "EvaluatorResult",
    "coordination_difficulty",
    "minimum_jerk_coefficients",
]

logger = logging.getLogger(__name__)

EvaluatorResult = Union[float, Tuple[float, ...]]
Evaluator = Callable[[SupportsTimedFeature, Sequence[SupportsTimedFeature]], EvaluatorResult]

AIM_DEVIATION_INTERCEPT = 100.0
FLASHLIGHT_VISIBLE_RADIUS = 200.0


def _aim_distance(feature: SupportsTimedFeature, include_sliders: bool) -> float:
    distance = float(feature.jump_distance)
    if include_sliders:
        distance += float(feature.travel_distance or 0.0)
    return distance


@dataclass(frozen=True, slots=True)
class AimEvaluator:
    """Aim difficulty such that ``hit_probability(difficulty, skill)`` holds.

    The cursor deviation grows with the jump distance (plus a fixed
    intercept) and shrinks with skill and available time; the object is hit
    when the deviation stays inside its radius.  Jumps shorter than a
    diameter scale down linearly.
    """

    intercept: float = AIM_DEVIATION_INTERCEPT
    include_sliders: bool = True

    def __call__(
        self,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature] = (),
    ) -> float:
        if feature.kind.is_trivial:
            return 0.0
        distance = _aim_distance(feature, self.include_sliders)
        if distance <= 0.0:
            return 0.0
        radius = float(feature.radius)
        time = float(feature.strain_time)
        if distance >= 2.0 * radius:
            return (distance + self.intercept) / (radius * time)
        return distance * (2.0 * radius + self.intercept) / (2.0 * radius * radius * time)


@dataclass(frozen=True, slots=True)
class SpeedEvaluator:
    """Instantaneous tapping strain of an object."""

    def __call__(
        self,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature] = (),
    ) -> float:
        if feature.kind.is_trivial:
            return 0.0
        return 1.0 / float(feature.strain_time)


@dataclass(frozen=True, slots=True)
class FlashlightEvaluator:
    """Two-axis difficulty: aim plus the jump leaving the visible area."""

    visible_radius: float = FLASHLIGHT_VISIBLE_RADIUS
    aim: AimEvaluator = AimEvaluator()

    def __call__(
        self,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature] = (),
    ) -> Tuple[float, float]:
        aim_difficulty = self.aim(feature, history)
        if feature.kind.is_trivial:
            return aim_difficulty, 0.0
        hidden = _aim_distance(feature, self.aim.include_sliders) - self.visible_radius
        if hidden <= 0.0:
            return aim_difficulty, 0.0
        visibility = hidden / (float(feature.radius) * float(feature.strain_time))
        return aim_difficulty, visibility


def minimum_jerk_coefficients(
    distance: float,
    duration: float,
    initial_velocity: float = 0.0,
    final_velocity: float = 0.0,
) -> Tuple[float, float, float]:
    """Return ``(a3, a4, a5)`` of the minimum-jerk quintic.

    The trajectory starts at rest position 0 with ``initial_velocity`` and
    zero acceleration and reaches ``distance`` after ``duration`` with
    ``final_velocity`` and zero acceleration.
    """

    t = duration
    a3 = (10.0 * distance - 4.0 * t * final_velocity - 6.0 * t * initial_velocity) / t ** 3
    a4 = (-15.0 * distance + 7.0 * t * final_velocity + 8.0 * t * initial_velocity) / t ** 4
    a5 = (6.0 * distance - 3.0 * t * (final_velocity + initial_velocity)) / t ** 5
    return a3, a4, a5


def coordination_difficulty(
    feature: SupportsTimedFeature,
    initial_velocity: float = 0.0,
    final_velocity: float = 0.0,
) -> float:
    """Reciprocal of the time the cursor spends over the target.

    The cursor follows the minimum-jerk path towards the object; the time in
    the circle runs from the moment the path crosses the circle edge until
    the object's hit time.
    """

    if feature.kind.is_trivial:
        return 0.0

    radius = float(feature.radius)
    duration = float(feature.strain_time)
    distance = float(feature.jump_distance)

    # Objects overlapping by half or more are already under the cursor.
    if distance < radius:
        return 1.0 / duration

    a3, a4, a5 = minimum_jerk_coefficients(
        distance, duration, initial_velocity, final_velocity
    )
    edge = distance - radius

    def outside_edge(t: float) -> float:
        position = initial_velocity * t + a3 * t ** 3 + a4 * t ** 4 + a5 * t ** 5
        return position - edge

    result = find_root(outside_edge, 0.0, duration)
    if result.converged:
        crossing = result.value
    else:
        crossing = duration * edge / distance
        logger.debug(
            "Trajectory crossing fell back to constant velocity",
            extra={"event": "coordination.crossing_fallback", "reason": result.reason},
        )
    time_in_circle = duration - crossing
    if time_in_circle <= 0.0:
        return 0.0
    return 1.0 / time_in_circle
