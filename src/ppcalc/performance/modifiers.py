"""Modifier tags and the multipliers they contribute.

Every tag maps to an independent :class:`ModifierEffect`; effects multiply
component-wise, so the result does not depend on tag order.  Adjustments to
the inputs themselves (extra tolerated misses under relax, compressed
ratings under touch device) are applied before any effect is evaluated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Mapping

from ppcalc.attributes import ScoreStatistics
from ppcalc.settings import ModifierSettings

__all__ = [
    "Modifier",
    "ModifierContext",
    "ModifierEffect",
    "adjust_effective_misses",
    "adjust_rating",
    "modifier_effect",
    "parse_modifiers",
]

logger = logging.getLogger(__name__)

BLINDS_BASE = 1.3
BLINDS_OBJECT_BONUS = 0.0016
BLINDS_ACCURACY_EXPONENT = 16.0
BLINDS_DRAIN_PENALTY = 0.003


class Modifier(str, Enum):
    NO_FAIL = "NF"
    SPUN_OUT = "SO"
    RELAX = "RX"
    HIDDEN = "HD"
    BLINDS = "BL"
    FLASHLIGHT = "FL"
    TOUCH_DEVICE = "TD"


_BY_TAG: Mapping[str, Modifier] = {member.value: member for member in Modifier}


def parse_modifiers(tags: Iterable[str]) -> FrozenSet[Modifier]:
    """Known modifiers among ``tags``; unknown tags are ignored."""

    parsed = set()
    for tag in tags:
        modifier = _BY_TAG.get(str(tag).strip().upper())
        if modifier is None:
            logger.debug("Ignoring unknown modifier", extra={"event": "modifier.unknown", "tag": tag})
            continue
        parsed.add(modifier)
    return frozenset(parsed)


@dataclass(frozen=True, slots=True)
class ModifierContext:
    effective_miss_count: float
    object_count: int
    approach_rate: float
    drain_rate: float
    spinner_count: int
    accuracy: float


@dataclass(frozen=True, slots=True)
class ModifierEffect:
    total: float = 1.0
    aim: float = 1.0
    speed: float = 1.0
    accuracy: float = 1.0
    flashlight: float = 1.0
    coordination: float = 1.0

    def combine(self, other: "ModifierEffect") -> "ModifierEffect":
        return ModifierEffect(
            total=self.total * other.total,
            aim=self.aim * other.aim,
            speed=self.speed * other.speed,
            accuracy=self.accuracy * other.accuracy,
            flashlight=self.flashlight * other.flashlight,
            coordination=self.coordination * other.coordination,
        )


def _no_fail(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    return ModifierEffect(
        total=max(
            settings.no_fail_floor,
            1.0 - settings.no_fail_per_miss * context.effective_miss_count,
        )
    )


def _spun_out(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    if context.object_count <= 0:
        return ModifierEffect()
    share = context.spinner_count / context.object_count
    return ModifierEffect(total=1.0 - share ** settings.spun_out_exponent)


def _relax(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    return ModifierEffect(total=settings.relax_multiplier, accuracy=0.0)


def _hidden(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    # Lower approach rates earn more under hidden.
    reading = 1.0 + settings.hidden_approach_rate_bonus * (
        settings.hidden_approach_rate_reference - context.approach_rate
    )
    return ModifierEffect(
        aim=reading,
        speed=reading,
        accuracy=settings.hidden_accuracy,
        flashlight=settings.hidden_flashlight,
    )


def _blinds(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    object_bonus = (
        context.object_count
        * (BLINDS_OBJECT_BONUS / (1.0 + 2.0 * context.effective_miss_count))
        * context.accuracy ** BLINDS_ACCURACY_EXPONENT
    )
    drain = 1.0 - BLINDS_DRAIN_PENALTY * context.drain_rate ** 2
    return ModifierEffect(
        aim=BLINDS_BASE + object_bonus * drain,
        speed=settings.blinds_speed,
        accuracy=settings.blinds_accuracy,
    )


def _flashlight(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    return ModifierEffect(accuracy=settings.flashlight_accuracy)


def _neutral(context: ModifierContext, settings: ModifierSettings) -> ModifierEffect:
    return ModifierEffect()


_EFFECTS: Mapping[Modifier, Callable[[ModifierContext, ModifierSettings], ModifierEffect]] = {
    Modifier.NO_FAIL: _no_fail,
    Modifier.SPUN_OUT: _spun_out,
    Modifier.RELAX: _relax,
    Modifier.HIDDEN: _hidden,
    Modifier.BLINDS: _blinds,
    Modifier.FLASHLIGHT: _flashlight,
    Modifier.TOUCH_DEVICE: _neutral,
}


def modifier_effect(
    modifiers: Iterable[Modifier],
    context: ModifierContext,
    settings: ModifierSettings,
) -> ModifierEffect:
    effect = ModifierEffect()
    for modifier in sorted(set(modifiers), key=lambda item: item.value):
        effect = effect.combine(_EFFECTS[modifier](context, settings))
    return effect


def adjust_effective_misses(
    modifiers: FrozenSet[Modifier], misses: float, score: ScoreStatistics
) -> float:
    """Relax treats every ok and meh as a likely combo break."""

    if Modifier.RELAX not in modifiers:
        return misses
    return min(misses + score.ok + score.meh, float(score.total_hits))


def adjust_rating(
    modifiers: FrozenSet[Modifier], rating: float, settings: ModifierSettings
) -> float:
    """Touch device play makes aim-style ratings less demanding."""

    if Modifier.TOUCH_DEVICE not in modifiers:
        return rating
    return rating ** settings.touch_device_exponent
