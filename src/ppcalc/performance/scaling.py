"""Scaling terms shared by the per-category performance values."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from scipy import special

from ppcore.equations.hit_probability import SQRT2
from ppcore.metrics.deviation import DeviationEstimate
from ppcore.metrics.miss_penalty import MissPenaltyCurve, order_statistic_ratio

from ppcalc.settings import CombinationSettings, DeviationScaling

__all__ = [
    "accuracy_value",
    "aim_deviation_scaling",
    "approach_rate_factor",
    "base_value",
    "combine_total",
    "combo_scaling",
    "flashlight_accuracy_scaling",
    "flashlight_length_scaling",
    "length_bonus",
    "miss_penalty_multiplier",
    "slider_nerf",
    "speed_deviation_scaling",
]

LONG_MAP_OBJECTS = 2000.0
FLASHLIGHT_SHORT_MAP_OBJECTS = 200.0
HIGH_APPROACH_RATE = 10.33
LOW_APPROACH_RATE = 8.0


def base_value(rating: float, *, base: float, exponent: float) -> float:
    """Category value before any score-dependent scaling."""

    return (5.0 * max(1.0, rating / base) - 4.0) ** exponent / 100000.0


def length_bonus(object_count: int) -> float:
    ratio = object_count / LONG_MAP_OBJECTS
    bonus = 0.95 + 0.5 * min(1.0, ratio)
    if object_count > LONG_MAP_OBJECTS:
        bonus += 0.5 * math.log10(ratio)
    return bonus


def flashlight_length_scaling(object_count: int) -> float:
    """Short maps spend a larger share of time at the widest flashlight radius."""

    scaling = 0.7 + 0.1 * min(1.0, object_count / FLASHLIGHT_SHORT_MAP_OBJECTS)
    if object_count > FLASHLIGHT_SHORT_MAP_OBJECTS:
        scaling += 0.2 * min(
            1.0, (object_count - FLASHLIGHT_SHORT_MAP_OBJECTS) / FLASHLIGHT_SHORT_MAP_OBJECTS
        )
    return scaling


def flashlight_accuracy_scaling(accuracy: float, overall_difficulty: float) -> float:
    return (0.5 + accuracy / 2.0) * (0.98 + overall_difficulty ** 2 / 2500.0)


def approach_rate_factor(approach_rate: float, *, reward_low: bool = True) -> float:
    """Extra multiplier above one for very high (and optionally low) AR."""

    if approach_rate > HIGH_APPROACH_RATE:
        return 1.0 + 0.3 * (approach_rate - HIGH_APPROACH_RATE)
    if reward_low and approach_rate < LOW_APPROACH_RATE:
        return 1.0 + 0.1 * (LOW_APPROACH_RATE - approach_rate)
    return 1.0


def combo_scaling(score_combo: int, max_combo: int, exponent: float) -> float:
    if max_combo <= 0:
        return 1.0
    return min((score_combo / max_combo) ** exponent, 1.0)


def miss_penalty_multiplier(
    misses: float,
    object_count: int,
    exponent: float,
    curve: Optional[MissPenaltyCurve] = None,
) -> float:
    """``ratio(misses) ** exponent``; exactly 1 without misses."""

    if misses <= 0.0:
        return 1.0
    if curve is None:
        ratio = order_statistic_ratio(misses, object_count)
    else:
        ratio = curve.skill_ratio(misses, object_count)
    return ratio ** exponent


def slider_nerf(
    slider_factor: float,
    slider_count: int,
    dropped_slider_ends: float,
    difficult_fraction: float,
) -> float:
    """Scale aim towards the no-slider rating as slider ends are dropped.

    ``difficult_fraction`` of the sliders is assumed hard to follow.
    """

    difficult = slider_count * difficult_fraction
    if slider_count <= 0 or difficult <= 0.0:
        return 1.0
    factor = min(max(slider_factor, 0.0), 1.0)
    dropped = min(max(dropped_slider_ends, 0.0), difficult)
    return (1.0 - factor) * (1.0 - dropped / difficult) ** 3 + factor


def aim_deviation_scaling(deviation: DeviationEstimate, scaling: DeviationScaling) -> float:
    return deviation.scale(
        lambda value: scaling.aim_scale * float(special.erf(scaling.aim_window / (SQRT2 * value)))
    )


def speed_deviation_scaling(deviation: DeviationEstimate, scaling: DeviationScaling) -> float:
    return deviation.scale(
        lambda value: scaling.speed_scale
        * float(special.erf(scaling.speed_window / (SQRT2 * value))) ** 2
    )


def accuracy_value(deviation: DeviationEstimate, scaling: DeviationScaling) -> float:
    """Accuracy value; zero unless the deviation is a finite estimate."""

    if not deviation.is_value:
        return 0.0
    return scaling.accuracy_scale * (scaling.accuracy_window / deviation.value) ** 2


def combine_total(values: Iterable[float], combination: CombinationSettings) -> float:
    items = [max(0.0, float(value)) for value in values]
    if combination.mode == "sum":
        return sum(items) * combination.multiplier
    power = combination.exponent
    return sum(value ** power for value in items) ** (1.0 / power) * combination.multiplier
