"""Closed-form skill estimates from order statistics of uniform objects.

For ``N`` objects of unit difficulty the skill needed to hit exactly
``N - m`` of them is the inverse error function of the ``(N - m)``-th order
statistic of ``N`` uniform draws.  That order statistic follows a
``Beta(N - m, m + 1)`` law; a fourth order Taylor expansion of ``erfinv``
around the Beta mean, weighted by the Beta central moments, gives an
analytic approximation that avoids a combinatorial root search per miss
count.
"""

from __future__ import annotations

import math
from typing import overload

import numpy as np
from scipy import special

from ppcore.equations.hit_probability import SQRT2

__all__ = [
    "steady_skill_from_misses",
    "steady_skill_curve",
    "steady_skill_ratio",
]

_HALF_SQRT_PI = math.sqrt(math.pi) / 2.0


def _steady_skill(total: np.ndarray, misses: np.ndarray) -> np.ndarray:
    hits = total - misses
    degenerate = hits <= 0.0
    a = np.where(degenerate, 1.0, hits)
    b = misses + 1.0
    y = special.erfinv(a / (total + 1.0))

    # Derivatives of erfinv expressed through y = erfinv(x).
    y1 = np.exp(y * y) * _HALF_SQRT_PI
    y2 = 2.0 * y * y1 * y1
    y3 = 2.0 * y1 * (y * y2 + (2.0 * y * y + 1.0) * y1 * y1)
    y4 = 2.0 * y1 * (
        y * y3 + (6.0 * y * y + 3.0) * y1 * y2 + (4.0 * y ** 3 + 6.0 * y) * y1 ** 3
    )

    s = a + b
    u2 = a * b / (s * s * (s + 1.0))
    u3 = 2.0 * (b - a) * a * b / ((s + 2.0) * s ** 3 * (s + 1.0))
    u4 = (
        3.0
        + 6.0 * ((a - b) * (s + 1.0) - a * b * (s + 2.0)) / (a * b * (s + 2.0) * (s + 3.0))
    ) * (u2 * u2)

    skill = SQRT2 * (y + 0.5 * y2 * u2 + y3 * u3 / 6.0 + y4 * u4 / 24.0)
    return np.where(degenerate, 0.0, np.maximum(skill, 0.0))


@overload
def steady_skill_from_misses(total: int, misses: float) -> float: ...


@overload
def steady_skill_from_misses(total: int, misses: np.ndarray) -> np.ndarray: ...


def steady_skill_from_misses(total, misses):
    """Return the skill needed to hit ``total - misses`` unit objects.

    ``misses`` may be fractional and may be an array; values are clamped to
    ``[0, total]`` and ``misses == total`` requires no skill at all.
    """

    total_value = float(total)
    if total_value <= 0.0:
        if np.ndim(misses):
            return np.zeros(np.shape(misses), dtype=float)
        return 0.0
    array = np.clip(np.asarray(misses, dtype=float), 0.0, total_value)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        result = _steady_skill(np.full_like(array, total_value), array)
    if np.ndim(misses) == 0:
        return float(result)
    return result


def steady_skill_curve(total: int) -> np.ndarray:
    """Return the skill required to hit ``1..total`` of ``total`` objects.

    Entry ``i`` holds the skill needed for ``i + 1`` hits, so the last entry
    is the full-combo requirement.
    """

    count = int(total)
    if count <= 0:
        return np.zeros(0, dtype=float)
    misses = count - 1 - np.arange(count, dtype=float)
    return steady_skill_from_misses(count, misses)


def steady_skill_ratio(total: int, misses: float | np.ndarray):
    """Return ``steady(total, misses) / steady(total, 0)`` in ``[0, 1]``."""

    full_combo = steady_skill_from_misses(total, 0.0)
    if full_combo <= 0.0:
        if np.ndim(misses):
            return np.ones(np.shape(misses), dtype=float)
        return 1.0
    ratio = np.clip(steady_skill_from_misses(total, misses) / full_combo, 0.0, 1.0)
    if np.ndim(misses) == 0:
        return float(ratio)
    return ratio
