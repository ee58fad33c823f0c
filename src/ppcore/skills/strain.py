"""Exponentially decayed strain tracking with peak capture."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from ppcore.skills.evaluators import Evaluator, SpeedEvaluator
from ppcore.skills.interfaces import SupportsTimedFeature

__all__ = [
    "DEFAULT_DECAY_BASE",
    "DEFAULT_MAX_DECAY_GAP",
    "StrainState",
    "StrainDecaySkill",
    "relevant_note_count",
]


DEFAULT_DECAY_BASE = 1.0 / math.e
# Gaps beyond this many milliseconds decay as if they were this long.
DEFAULT_MAX_DECAY_GAP = 10_000.0


@dataclass(slots=True)
class StrainState:
    """Running strain, its peak and the strain recorded after each object."""

    current: float = 0.0
    peak: float = 0.0
    strains: List[float] = field(default_factory=list)


def relevant_note_count(strains: Sequence[float]) -> float:
    """Logistic count of objects whose strain is close to the peak."""

    if not strains:
        return 0.0
    peak = max(strains)
    if peak <= 0.0:
        return 0.0
    total = 0.0
    for strain in strains:
        total += 1.0 / (1.0 + math.exp(-(strain / peak * 12.0 - 6.0)))
    return total


@dataclass(frozen=True, slots=True)
class StrainDecaySkill:
    """Peak of an exponentially decayed sum of per-object strains.

    Each object adds its instantaneous strain, then the running sum decays by
    ``decay_base ** (delta_time / 1000)``.  The elapsed time is clamped to
    ``max_decay_gap`` milliseconds.
    """

    name: str = "speed"
    evaluator: Evaluator = SpeedEvaluator()
    decay_base: float = DEFAULT_DECAY_BASE
    max_decay_gap: float = DEFAULT_MAX_DECAY_GAP
    history_length: int = 2

    def __post_init__(self) -> None:
        if not 0.0 < self.decay_base < 1.0:
            raise ValueError("decay_base must lie strictly between 0 and 1")
        if self.max_decay_gap <= 0.0:
            raise ValueError("max_decay_gap must be positive")

    def initial_state(self) -> StrainState:
        return StrainState()

    def process(
        self,
        state: StrainState,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature],
        lookahead: SupportsTimedFeature | None = None,
    ) -> StrainState:
        elapsed = min(max(float(feature.delta_time), 0.0), self.max_decay_gap)
        state.current += float(self.evaluator(feature, history))
        state.current *= self.decay_base ** (elapsed / 1000.0)
        if state.current > state.peak:
            state.peak = state.current
        state.strains.append(state.current)
        return state

    def value(self, state: StrainState) -> float:
        return state.peak

    def relevant_note_count(self, state: StrainState) -> float:
        return relevant_note_count(state.strains)
