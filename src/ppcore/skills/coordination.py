"""Tap coordination skill built on minimum-jerk cursor trajectories."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from ppcore.equations.rootfinding import RootSearch
from ppcore.skills.evaluators import coordination_difficulty
from ppcore.skills.interfaces import SupportsTimedFeature
from ppcore.skills.threshold import (
    Criterion,
    FullComboProbability,
    SkillSolution,
    solve_skill_level,
)

__all__ = ["CoordinationState", "CoordinationSkill"]


@dataclass(slots=True)
class CoordinationState:
    difficulties: List[float] = field(default_factory=list)
    initial_velocity: float = 0.0


@dataclass(frozen=True, slots=True)
class CoordinationSkill:
    """Skill needed to tap while the cursor sits on every object.

    Aim is assumed perfect; the per-object difficulty is the reciprocal of
    the time the minimum-jerk path spends inside the circle.  The final
    velocity of each movement becomes the initial velocity of the next.
    """

    name: str = "coordination"
    criterion: Criterion = FullComboProbability(0.5)
    search: RootSearch = RootSearch()
    # Zero means snap aim: the cursor stops on every object.
    final_velocity: float = 0.0
    history_length: int = 1

    def initial_state(self) -> CoordinationState:
        return CoordinationState()

    def process(
        self,
        state: CoordinationState,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature],
        lookahead: SupportsTimedFeature | None = None,
    ) -> CoordinationState:
        difficulty = coordination_difficulty(
            feature,
            initial_velocity=state.initial_velocity,
            final_velocity=self.final_velocity,
        )
        state.difficulties.append(difficulty)
        if not feature.kind.is_trivial:
            state.initial_velocity = self.final_velocity
        return state

    def solve(self, state: CoordinationState) -> SkillSolution:
        if sum(state.difficulties) == 0.0:
            return SkillSolution(0.0, None)
        return solve_skill_level(state.difficulties, self.criterion, self.search)

    def value(self, state: CoordinationState) -> float:
        return self.solve(state).skill

    def object_difficulties(self, state: CoordinationState) -> List[float]:
        return list(state.difficulties)
