"""Combine difficulty attributes with a score into performance values."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ppcore.config.loader import load_calibration
from ppcore.metrics.deviation import DeviationEstimate, circle_deviation, speed_deviation

from ppcalc.attributes import DifficultyAttributes, PerformanceBreakdown, ScoreStatistics
from ppcalc.performance import scaling
from ppcalc.performance.modifiers import (
    Modifier,
    ModifierContext,
    ModifierEffect,
    adjust_effective_misses,
    adjust_rating,
    modifier_effect,
    parse_modifiers,
)
from ppcalc.settings import PerformanceSettings

__all__ = ["PerformanceCalculator", "effective_miss_count"]

logger = logging.getLogger(__name__)

# Sliders whose end can be dropped without breaking combo shorten max combo by this much.
SLIDER_END_COMBO_ALLOWANCE = 0.1


def effective_miss_count(attributes: DifficultyAttributes, score: ScoreStatistics) -> float:
    """Literal misses, raised when the combo suggests unreported breaks."""

    combo_based = 0.0
    if attributes.slider_count > 0:
        threshold = attributes.max_combo - SLIDER_END_COMBO_ALLOWANCE * attributes.slider_count
        if score.max_combo < threshold:
            combo_based = threshold / max(1.0, float(score.max_combo))
    combo_based = min(combo_based, float(score.total_hits))
    return max(float(score.miss), combo_based)


class PerformanceCalculator:
    """Performance values for scores on maps with known attributes.

    The calculator holds no per-call state, so one instance can serve many
    scores concurrently.
    """

    def __init__(self, settings: PerformanceSettings | None = None) -> None:
        self.settings = settings or PerformanceSettings.from_config(load_calibration())

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PerformanceCalculator":
        return cls(PerformanceSettings.from_config(config))

    def calculate(
        self, attributes: DifficultyAttributes, score: ScoreStatistics
    ) -> PerformanceBreakdown:
        settings = self.settings
        if score.total_hits == 0:
            return PerformanceBreakdown.zero(include_coordination=settings.include_coordination)

        modifiers = parse_modifiers(score.mods)
        # Length terms follow the map, so extra judgements cannot lengthen it.
        object_count = attributes.object_count or score.total_hits
        misses = adjust_effective_misses(
            modifiers, effective_miss_count(attributes, score), score
        )
        deviation = circle_deviation(
            great=score.great,
            circle_count=attributes.hit_circle_count,
            slider_count=attributes.slider_count,
            spinner_count=attributes.spinner_count,
            overall_difficulty=attributes.overall_difficulty,
        )
        speed_dev = speed_deviation(
            great=score.great,
            circle_count=attributes.hit_circle_count,
            slider_count=attributes.slider_count,
            spinner_count=attributes.spinner_count,
            speed_note_count=attributes.speed_note_count,
            overall_difficulty=attributes.overall_difficulty,
        )
        effect = modifier_effect(
            modifiers,
            ModifierContext(
                effective_miss_count=misses,
                object_count=object_count,
                approach_rate=attributes.approach_rate,
                drain_rate=attributes.drain_rate,
                spinner_count=attributes.spinner_count,
                accuracy=float(score.accuracy),
            ),
            settings.modifiers,
        )

        aim = self._aim_value(attributes, score, modifiers, effect, misses, object_count, deviation)
        speed = self._speed_value(attributes, score, effect, misses, object_count, speed_dev)
        accuracy = self._accuracy_value(attributes, effect, deviation)
        flashlight = self._flashlight_value(
            attributes, score, modifiers, effect, misses, object_count
        )
        coordination = None
        if settings.include_coordination:
            coordination = self._coordination_value(
                attributes, score, effect, misses, object_count
            )

        values = [aim, speed, accuracy, flashlight]
        if coordination is not None:
            values.append(coordination)
        total = scaling.combine_total(values, settings.combination) * effect.total

        logger.debug(
            "Computed performance",
            extra={
                "event": "performance.calculated",
                "effective_miss_count": misses,
                "modifiers": sorted(modifier.value for modifier in modifiers),
                "total": total,
            },
        )
        return PerformanceBreakdown(
            aim=aim,
            speed=speed,
            accuracy=accuracy,
            flashlight=flashlight,
            coordination=coordination,
            effective_miss_count=misses,
            deviation=deviation,
            speed_deviation=speed_dev,
            total=total,
        )

    def _common_scaling(
        self,
        category: str,
        attributes: DifficultyAttributes,
        score: ScoreStatistics,
        misses: float,
        object_count: int,
        *,
        use_curve: bool = False,
    ) -> float:
        settings = self.settings
        curve = attributes.miss_penalty if use_curve else None
        return scaling.miss_penalty_multiplier(
            misses, object_count, settings.miss_exponent(category), curve
        ) * scaling.combo_scaling(score.max_combo, attributes.max_combo, settings.combo_exponent)

    def _aim_value(
        self,
        attributes: DifficultyAttributes,
        score: ScoreStatistics,
        modifiers: frozenset[Modifier],
        effect: ModifierEffect,
        misses: float,
        object_count: int,
        deviation: DeviationEstimate,
    ) -> float:
        settings = self.settings
        rating = adjust_rating(modifiers, attributes.aim_difficulty, settings.modifiers)
        value = scaling.base_value(
            rating, base=settings.rating_base, exponent=settings.rating_exponent
        )
        value *= scaling.length_bonus(object_count)
        value *= self._common_scaling(
            "aim", attributes, score, misses, object_count, use_curve=True
        )
        value *= scaling.approach_rate_factor(attributes.approach_rate)
        value *= effect.aim

        dropped = min(
            float(score.ok + score.meh + score.miss),
            float(attributes.max_combo - score.max_combo),
        )
        value *= scaling.slider_nerf(
            attributes.slider_factor,
            attributes.slider_count,
            dropped,
            settings.difficult_slider_fraction,
        )
        return value * scaling.aim_deviation_scaling(deviation, settings.deviation)

    def _speed_value(
        self,
        attributes: DifficultyAttributes,
        score: ScoreStatistics,
        effect: ModifierEffect,
        misses: float,
        object_count: int,
        deviation: DeviationEstimate,
    ) -> float:
        settings = self.settings
        value = scaling.base_value(
            attributes.speed_difficulty,
            base=settings.rating_base,
            exponent=settings.rating_exponent,
        )
        value *= scaling.length_bonus(object_count)
        value *= self._common_scaling("speed", attributes, score, misses, object_count)
        value *= scaling.approach_rate_factor(attributes.approach_rate, reward_low=False)
        value *= effect.speed
        return value * scaling.speed_deviation_scaling(deviation, settings.deviation)

    def _accuracy_value(
        self,
        attributes: DifficultyAttributes,
        effect: ModifierEffect,
        deviation: DeviationEstimate,
    ) -> float:
        if attributes.hit_circle_count == 0:
            return 0.0
        return scaling.accuracy_value(deviation, self.settings.deviation) * effect.accuracy

    def _flashlight_value(
        self,
        attributes: DifficultyAttributes,
        score: ScoreStatistics,
        modifiers: frozenset[Modifier],
        effect: ModifierEffect,
        misses: float,
        object_count: int,
    ) -> float:
        if Modifier.FLASHLIGHT not in modifiers:
            return 0.0
        settings = self.settings
        rating = adjust_rating(modifiers, attributes.flashlight_difficulty, settings.modifiers)
        value = rating ** settings.flashlight_exponent * settings.flashlight_multiplier
        value *= effect.flashlight
        value *= self._common_scaling("flashlight", attributes, score, misses, object_count)
        value *= scaling.flashlight_length_scaling(object_count)
        return value * scaling.flashlight_accuracy_scaling(
            float(score.accuracy), attributes.overall_difficulty
        )

    def _coordination_value(
        self,
        attributes: DifficultyAttributes,
        score: ScoreStatistics,
        effect: ModifierEffect,
        misses: float,
        object_count: int,
    ) -> float:
        settings = self.settings
        value = scaling.base_value(
            attributes.coordination_difficulty,
            base=settings.rating_base,
            exponent=settings.rating_exponent,
        )
        value *= scaling.length_bonus(object_count)
        value *= self._common_scaling("coordination", attributes, score, misses, object_count)
        return value * effect.coordination
