"""Score-level metrics derived from difficulty and judgement counts."""

from ppcore.metrics.deviation import (
    DeviationEstimate,
    DeviationKind,
    circle_deviation,
    estimate_deviation,
    great_hit_window,
    speed_deviation,
)
from ppcore.metrics.miss_penalty import (
    MissPenaltyCurve,
    fit_miss_penalty_curve,
    miss_penalty_errors,
    monotone_ratio,
    order_statistic_ratio,
)

__all__ = [
    "DeviationEstimate",
    "DeviationKind",
    "MissPenaltyCurve",
    "circle_deviation",
    "estimate_deviation",
    "fit_miss_penalty_curve",
    "great_hit_window",
    "miss_penalty_errors",
    "monotone_ratio",
    "order_statistic_ratio",
    "speed_deviation",
]
