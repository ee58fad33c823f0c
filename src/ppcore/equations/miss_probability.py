"""Approximate distributions of the miss count over independent objects.

The miss count of a map is a Poisson-binomial variable: a sum of
independent Bernoulli trials with per-object miss probability ``1 - p_i``.
Exact evaluation is quadratic in the object count, so these helpers expose
two moment-based approximations instead.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.polynomial import hermite_e
from scipy import stats

__all__ = [
    "PoissonBinomialApproximation",
    "EdgeworthMissDistribution",
]


def _miss_probabilities(hit_probabilities: Sequence[float]) -> np.ndarray:
    values = np.asarray(hit_probabilities, dtype=float).ravel()
    return np.clip(1.0 - values, 0.0, 1.0)


class PoissonBinomialApproximation:
    """Skew-corrected normal approximation of the miss count.

    Uses the refined normal approximation
    ``Phi(k) + v (1 - k^2) phi(k)`` with a half-miss continuity correction,
    where ``v`` is the third cumulant scaled by ``6 sigma^3``.
    """

    __slots__ = ("mu", "sigma", "skew_correction")

    def __init__(self, hit_probabilities: Sequence[float]) -> None:
        misses = _miss_probabilities(hit_probabilities)
        variance_terms = misses * (1.0 - misses)
        self.mu = float(np.sum(misses))
        variance = float(np.sum(variance_terms))
        self.sigma = math.sqrt(variance)
        gamma = float(np.sum(variance_terms * (1.0 - 2.0 * misses)))
        self.skew_correction = gamma / (6.0 * self.sigma ** 3) if self.sigma > 0.0 else 0.0

    def cdf(self, misses: float) -> float:
        """Probability of at most ``misses`` misses."""

        if self.sigma == 0.0:
            return 1.0 if misses + 0.5 >= self.mu else 0.0
        k = (misses + 0.5 - self.mu) / self.sigma
        result = stats.norm.cdf(k) + self.skew_correction * (1.0 - k * k) * stats.norm.pdf(k)
        return float(min(1.0, max(0.0, result)))

    def pdf(self, misses: float, precision: float = 1e-6) -> float:
        """Finite-difference density of the miss count at ``misses``."""

        return (self.cdf(misses + precision) - self.cdf(misses)) / precision


class EdgeworthMissDistribution:
    """Second order Edgeworth expansion of the miss-count density."""

    __slots__ = ("mu", "sigma", "coefficients")

    def __init__(self, hit_probabilities: Sequence[float]) -> None:
        misses = _miss_probabilities(hit_probabilities)
        variance_terms = misses * (1.0 - misses)
        self.mu = float(np.sum(misses))
        variance = float(np.sum(variance_terms))
        self.sigma = math.sqrt(variance)
        coefficients = np.zeros(7, dtype=float)
        coefficients[0] = 1.0
        if self.sigma > 0.0:
            third = float(np.sum(variance_terms * (1.0 - 2.0 * misses)))
            fourth = float(np.sum(variance_terms * (1.0 - 6.0 * variance_terms)))
            skewness = third / self.sigma ** 3
            excess_kurtosis = fourth / self.sigma ** 4
            coefficients[3] = skewness / 6.0
            coefficients[4] = excess_kurtosis / 24.0
            coefficients[6] = skewness * skewness / 72.0
        self.coefficients = coefficients

    def pdf(self, misses: float) -> float:
        """Approximate density of observing ``misses`` misses."""

        if self.sigma == 0.0:
            return 1.0 if abs(misses - self.mu) < 0.5 else 0.0
        y = (misses - self.mu) / self.sigma
        correction = float(hermite_e.hermeval(y, self.coefficients))
        density = correction * float(stats.norm.pdf(y)) / self.sigma
        return max(0.0, density)

    def cdf(self, misses: float) -> float:
        """Approximate probability of at most ``misses`` misses.

        Integrates the expansion term by term using
        ``d/dy [-He_{n-1}(y) phi(y)] = He_n(y) phi(y)``.
        """

        if self.sigma == 0.0:
            return 1.0 if misses + 0.5 >= self.mu else 0.0
        y = (misses + 0.5 - self.mu) / self.sigma
        shifted = np.zeros(6, dtype=float)
        shifted[2] = self.coefficients[3]
        shifted[3] = self.coefficients[4]
        shifted[5] = self.coefficients[6]
        tail = float(hermite_e.hermeval(y, shifted)) * float(stats.norm.pdf(y))
        result = float(stats.norm.cdf(y)) - tail
        return float(min(1.0, max(0.0, result)))
