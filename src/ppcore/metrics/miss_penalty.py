"""Fit and evaluate the per-map miss penalty curve.

For ``N`` equally difficult objects the skill needed to survive ``m``
misses follows the closed-form order-statistic curve of
:mod:`ppcore.equations.order_statistics`.  Real maps mix easy and hard
objects, so dropping the hardest ones lowers the required skill faster than
the uniform curve predicts.  The fitter measures the pointwise gap between
the uniform curve and a difficulty-weighted cumulative curve, normalises it
into a density over the miss fraction and summarises it with a
moment-matched Beta distribution.  Evaluating the penalty later costs a few
Beta CDF lookups instead of refitting the whole map.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

import numpy as np
from scipy import stats

from ppcore.equations.order_statistics import steady_skill_curve, steady_skill_ratio

__all__ = [
    "MissPenaltyCurve",
    "fit_miss_penalty_curve",
    "miss_penalty_errors",
    "monotone_ratio",
    "order_statistic_ratio",
]

logger = logging.getLogger(__name__)

_ERROR_TOLERANCE = 1e-12
_MIN_VARIANCE = 1e-9
_MEAN_MARGIN = 1e-9


@dataclass(frozen=True, slots=True)
class MissPenaltyCurve:
    """Beta summary of how much easier a map gets per allowed miss."""

    alpha: float
    beta: float
    total_error: float

    def __post_init__(self) -> None:
        if not (self.alpha > 0.0 and self.beta > 0.0):
            raise ValueError("Beta shape parameters must be positive")
        if not math.isfinite(self.total_error) or self.total_error < 0.0:
            raise ValueError("total_error must be a non-negative finite number")

    @classmethod
    def neutral(cls) -> "MissPenaltyCurve":
        """Curve that reproduces the uniform order-statistic penalty."""

        return cls(alpha=1.0, beta=1.0, total_error=0.0)

    @property
    def is_neutral(self) -> bool:
        return self.total_error == 0.0

    def error_mass(self, misses: np.ndarray | float, object_count: int) -> np.ndarray:
        """Fitted gap between the weighted and uniform curves at ``misses``."""

        grid = np.atleast_1d(np.asarray(misses, dtype=float))
        if self.is_neutral or object_count <= 1:
            return np.zeros_like(grid)
        count = float(object_count)
        lower = np.clip((grid + 0.5) / count, 0.0, 1.0)
        upper = np.clip((grid + 1.5) / count, 0.0, 1.0)
        mass = stats.beta.cdf(upper, self.alpha, self.beta) - stats.beta.cdf(
            lower, self.alpha, self.beta
        )
        return np.where(grid <= 0.0, 0.0, self.total_error * mass)

    def skill_ratio(self, misses: float, object_count: int) -> float:
        """Fraction of the full-combo skill still required after ``misses``."""

        def ratio_at(grid: np.ndarray) -> np.ndarray:
            uniform = steady_skill_ratio(object_count, grid)
            return np.asarray(uniform, dtype=float) - self.error_mass(grid, object_count)

        return monotone_ratio(ratio_at, misses, object_count)

    def as_dict(self) -> Mapping[str, float]:
        return {
            "alpha": float(self.alpha),
            "beta": float(self.beta),
            "total_error": float(self.total_error),
        }

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "MissPenaltyCurve":
        return cls(
            alpha=float(payload["alpha"]),
            beta=float(payload["beta"]),
            total_error=float(payload.get("total_error", 0.0)),
        )


def monotone_ratio(
    ratio_at: Callable[[np.ndarray], np.ndarray],
    misses: float,
    object_count: int,
) -> float:
    """Evaluate ``ratio_at`` as a non-increasing curve of the miss count.

    The ratio is sampled on the integer grid ``0..ceil(misses)``, forced to
    start at 1 and to never increase, and linearly interpolated for
    fractional miss counts.
    """

    if not misses > 0.0 or object_count <= 0:
        return 1.0
    clamped = min(float(misses), float(object_count))
    upper = int(math.ceil(clamped))
    grid = np.arange(upper + 1, dtype=float)
    raw = np.clip(np.asarray(ratio_at(grid), dtype=float), 0.0, 1.0)
    raw = np.where(np.isfinite(raw), raw, 0.0)
    raw[0] = 1.0
    envelope = np.minimum.accumulate(raw)
    lower = int(math.floor(clamped))
    fraction = clamped - lower
    if fraction == 0.0:
        return float(envelope[lower])
    return float(envelope[lower] + fraction * (envelope[upper] - envelope[lower]))


def order_statistic_ratio(misses: float, object_count: int) -> float:
    """Uniform-difficulty skill ratio after ``misses`` among ``object_count``."""

    def ratio_at(grid: np.ndarray) -> np.ndarray:
        return np.asarray(steady_skill_ratio(object_count, grid), dtype=float)

    return monotone_ratio(ratio_at, misses, object_count)


def miss_penalty_errors(difficulties: Sequence[float]) -> np.ndarray:
    """Pointwise gap between weighted and uniform skill curves.

    Entry ``i`` compares the skill fraction needed to hit the ``i + 1``
    easiest objects; the full-combo entry, always zero, is omitted.
    """

    values = np.sort(np.asarray(difficulties, dtype=float))
    values = np.clip(values[np.isfinite(values)], 0.0, None)
    count = values.size
    if count <= 1:
        return np.zeros(0, dtype=float)

    steady = steady_skill_curve(count)
    previous = np.concatenate(([0.0], steady[:-1]))
    cumulative = np.cumsum(values * (steady - previous))
    if not cumulative[-1] > 0.0 or not steady[-1] > 0.0:
        return np.zeros(count - 1, dtype=float)
    return cumulative[:-1] / cumulative[-1] - steady[:-1] / steady[-1]


def fit_miss_penalty_curve(difficulties: Sequence[float]) -> MissPenaltyCurve:
    """Fit a :class:`MissPenaltyCurve` to per-object ``difficulties``.

    Degenerate inputs (fewer than two objects, all-trivial maps, uniform
    difficulties) yield :meth:`MissPenaltyCurve.neutral`.  The Beta moments
    are clamped so the shape parameters stay positive and finite.
    """

    errors = miss_penalty_errors(difficulties)
    count = errors.size + 1
    if errors.size == 0:
        return MissPenaltyCurve.neutral()

    magnitudes = np.abs(errors)
    total = float(np.sum(magnitudes))
    if not math.isfinite(total) or total <= _ERROR_TOLERANCE * errors.size:
        return MissPenaltyCurve.neutral()

    density = magnitudes / total
    support = (count - np.arange(errors.size, dtype=float)) / count
    mean = float(np.sum(density * support))
    variance = float(np.sum(density * (support - mean) ** 2))

    if not (math.isfinite(mean) and math.isfinite(variance)):
        logger.debug(
            "Miss penalty moments are not finite",
            extra={"event": "miss_penalty.invalid_moments", "objects": count},
        )
        return MissPenaltyCurve.neutral()

    mean = min(max(mean, _MEAN_MARGIN), 1.0 - _MEAN_MARGIN)
    ceiling = mean * (1.0 - mean) * (1.0 - 1e-6)
    clamped_variance = min(max(variance, _MIN_VARIANCE), ceiling)
    if clamped_variance != variance:
        logger.debug(
            "Clamped miss penalty variance",
            extra={
                "event": "miss_penalty.variance_clamped",
                "variance": variance,
                "clamped": clamped_variance,
            },
        )

    alpha = mean * (mean * (1.0 - mean) / clamped_variance - 1.0)
    beta = alpha * (1.0 - mean) / mean
    if not (alpha > 0.0 and beta > 0.0 and math.isfinite(alpha) and math.isfinite(beta)):
        return MissPenaltyCurve.neutral()
    return MissPenaltyCurve(alpha=alpha, beta=beta, total_error=total)
