"""Skill levels solved from aggregate hit-probability thresholds.

The strategies here collect per-object difficulties and, once the stream is
exhausted, search for the skill at which an aggregate predicate crosses a
fixed threshold.  Every criterion is written as a residual that increases
with skill, so a non-negative residual at zero skill means no skill is
required and an exhausted bracket expansion resolves to the criterion's
documented fallback.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Sequence, Tuple, Union

import numpy as np

from ppcore.equations.hit_probability import joint_hit_probabilities
from ppcore.equations.miss_probability import (
    EdgeworthMissDistribution,
    PoissonBinomialApproximation,
)
from ppcore.equations.rootfinding import RootResult, RootSearch, find_root_expand
from ppcore.skills.evaluators import AimEvaluator, Evaluator
from ppcore.skills.interfaces import SupportsTimedFeature

__all__ = [
    "FullComboProbability",
    "ExpectedMisses",
    "MISS_DISTRIBUTIONS",
    "MissProbability",
    "Criterion",
    "SkillSolution",
    "ThresholdState",
    "ThresholdSkill",
    "difficulty_matrix",
    "solve_skill_level",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FullComboProbability:
    """Skill at which the chance of hitting every object equals ``probability``."""

    probability: float = 0.5
    fallback: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 < self.probability < 1.0:
            raise ValueError("probability must lie strictly between 0 and 1")

    def residual(self, probabilities: np.ndarray) -> float:
        return float(np.prod(probabilities)) - self.probability


@dataclass(frozen=True, slots=True)
class ExpectedMisses:
    """Skill at which the expected miss count drops to ``misses``."""

    misses: float = 1.0
    fallback: float = math.inf

    def __post_init__(self) -> None:
        if self.misses < 0.0:
            raise ValueError("misses must be non-negative")

    def residual(self, probabilities: np.ndarray) -> float:
        expected_misses = probabilities.size - float(np.sum(probabilities))
        return self.misses - expected_misses


MISS_DISTRIBUTIONS: Mapping[str, Callable[[np.ndarray], Any]] = {
    "normal": PoissonBinomialApproximation,
    "edgeworth": EdgeworthMissDistribution,
}


@dataclass(frozen=True, slots=True)
class MissProbability:
    """Skill at which ``P(misses <= k)`` reaches ``probability``.

    ``distribution`` selects the miss-count approximation: ``"normal"`` for
    the skew-corrected normal or ``"edgeworth"`` for the Edgeworth expansion.
    """

    misses: float = 1.0
    probability: float = 0.5
    fallback: float = math.inf
    distribution: str = "normal"

    def __post_init__(self) -> None:
        if self.misses < 0.0:
            raise ValueError("misses must be non-negative")
        if not 0.0 < self.probability < 1.0:
            raise ValueError("probability must lie strictly between 0 and 1")
        if self.distribution not in MISS_DISTRIBUTIONS:
            raise ValueError(
                f"Unknown miss distribution {self.distribution!r} "
                f"(expected one of {', '.join(MISS_DISTRIBUTIONS)})"
            )

    def residual(self, probabilities: np.ndarray) -> float:
        distribution = MISS_DISTRIBUTIONS[self.distribution](probabilities)
        return distribution.cdf(self.misses) - self.probability


Criterion = Union[FullComboProbability, ExpectedMisses, MissProbability]


@dataclass(frozen=True, slots=True)
class SkillSolution:
    """Resolved skill level together with the raw search outcome."""

    skill: float
    search: RootResult | None
    used_fallback: bool = False


def difficulty_matrix(difficulties: Sequence[Union[float, Sequence[float]]]) -> np.ndarray:
    """Stack scalar or per-axis difficulties into a 1-D or 2-D array."""

    if len(difficulties) == 0:
        return np.zeros(0, dtype=float)
    return np.asarray(difficulties, dtype=float)


def solve_skill_level(
    difficulties: Sequence[Union[float, Sequence[float]]] | np.ndarray,
    criterion: Criterion,
    search: RootSearch | None = None,
) -> SkillSolution:
    """Return the skill at which ``criterion`` is met for ``difficulties``."""

    matrix = difficulty_matrix(difficulties)
    params = search or RootSearch()
    if matrix.shape[0] == 0:
        return SkillSolution(0.0, None)

    def residual(skill: float) -> float:
        return criterion.residual(joint_hit_probabilities(matrix, skill))

    if residual(params.lower) >= 0.0:
        return SkillSolution(float(params.lower), None)

    result = find_root_expand(residual, params)
    if result.converged:
        return SkillSolution(max(0.0, result.value), result)
    logger.debug(
        "Skill search fell back",
        extra={
            "event": "skill.fallback",
            "criterion": type(criterion).__name__,
            "reason": result.reason,
            "fallback": criterion.fallback,
        },
    )
    return SkillSolution(criterion.fallback, result, used_fallback=True)


@dataclass(slots=True)
class ThresholdState:
    """Per-object difficulties collected while folding over the stream."""

    difficulties: List[Union[float, Tuple[float, ...]]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ThresholdSkill:
    """Collect evaluator outputs and solve the skill level at the end."""

    name: str = "aim"
    evaluator: Evaluator = AimEvaluator()
    criterion: Criterion = ExpectedMisses()
    search: RootSearch = RootSearch()
    history_length: int = 1

    def initial_state(self) -> ThresholdState:
        return ThresholdState()

    def process(
        self,
        state: ThresholdState,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature],
        lookahead: SupportsTimedFeature | None = None,
    ) -> ThresholdState:
        state.difficulties.append(self.evaluator(feature, history))
        return state

    def solve(self, state: ThresholdState) -> SkillSolution:
        return solve_skill_level(state.difficulties, self.criterion, self.search)

    def value(self, state: ThresholdState) -> float:
        return self.solve(state).skill

    def object_difficulties(self, state: ThresholdState) -> List[float]:
        """Scalar per-object difficulties (first axis for multi-axis output)."""

        values: List[float] = []
        for entry in state.difficulties:
            if isinstance(entry, tuple):
                values.append(float(entry[0]) if entry else 0.0)
            else:
                values.append(float(entry))
        return values
