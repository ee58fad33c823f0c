"""Skill strategies folding over per-object feature streams."""

from __future__ import annotations

from ppcore.skills.accumulate import (
    SkillAccumulator,
    accumulate,
    accumulate_many,
    fold_states,
)
from ppcore.skills.coordination import CoordinationSkill, CoordinationState
from ppcore.skills.evaluators import (
    AimEvaluator,
    FlashlightEvaluator,
    SpeedEvaluator,
    coordination_difficulty,
    minimum_jerk_coefficients,
)
from ppcore.skills.interfaces import (
    DEFAULT_RADIUS,
    ObjectKind,
    SkillStrategy,
    SupportsTimedFeature,
    TimedFeature,
)
from ppcore.skills.registry import build_strategies, build_strategy
from ppcore.skills.strain import StrainDecaySkill, StrainState, relevant_note_count
from ppcore.skills.threshold import (
    ExpectedMisses,
    FullComboProbability,
    MissProbability,
    SkillSolution,
    ThresholdSkill,
    ThresholdState,
    solve_skill_level,
)

__all__ = [
    "DEFAULT_RADIUS",
    "ObjectKind",
    "TimedFeature",
    "SupportsTimedFeature",
    "SkillStrategy",
    "AimEvaluator",
    "SpeedEvaluator",
    "FlashlightEvaluator",
    "coordination_difficulty",
    "minimum_jerk_coefficients",
    "StrainDecaySkill",
    "StrainState",
    "relevant_note_count",
    "ThresholdSkill",
    "ThresholdState",
    "FullComboProbability",
    "ExpectedMisses",
    "MissProbability",
    "SkillSolution",
    "solve_skill_level",
    "CoordinationSkill",
    "CoordinationState",
    "SkillAccumulator",
    "accumulate",
    "accumulate_many",
    "fold_states",
    "build_strategy",
    "build_strategies",
]
