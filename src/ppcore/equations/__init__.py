"""Closed-form probability helpers shared by skills and metrics."""

from __future__ import annotations

from ppcore.equations.hit_probability import (
    SQRT2,
    hit_probabilities,
    hit_probability,
    joint_hit_probabilities,
)
from ppcore.equations.miss_probability import (
    EdgeworthMissDistribution,
    PoissonBinomialApproximation,
)
from ppcore.equations.order_statistics import (
    steady_skill_curve,
    steady_skill_from_misses,
    steady_skill_ratio,
)
from ppcore.equations.rootfinding import (
    RootResult,
    RootSearch,
    expand_upper_bracket,
    find_root,
    find_root_expand,
)

__all__ = [
    "SQRT2",
    "hit_probability",
    "hit_probabilities",
    "joint_hit_probabilities",
    "PoissonBinomialApproximation",
    "EdgeworthMissDistribution",
    "steady_skill_from_misses",
    "steady_skill_curve",
    "steady_skill_ratio",
    "RootResult",
    "RootSearch",
    "find_root",
    "find_root_expand",
    "expand_upper_bracket",
]
