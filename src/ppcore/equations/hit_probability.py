"""Gaussian hit model relating per-object difficulty and player skill."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from scipy import special

__all__ = [
    "SQRT2",
    "hit_probability",
    "hit_probabilities",
    "joint_hit_probabilities",
]


SQRT2 = math.sqrt(2.0)


def hit_probability(difficulty: float, skill: float) -> float:
    """Return the probability of hitting an object of ``difficulty`` at ``skill``.

    Hit error is modelled as a zero-mean Gaussian whose standard deviation is
    proportional to ``difficulty / skill``; the error function yields the
    chance that the absolute error stays inside a unit window.  Trivial
    objects (zero difficulty) are always hit and zero skill never hits
    anything else.  An infinite difficulty faced with infinite skill has no
    defined ratio and counts as a miss.
    """

    if difficulty == 0.0:
        return 1.0
    if skill == 0.0:
        return 0.0
    value = float(special.erf(skill / (SQRT2 * difficulty)))
    if math.isnan(value) or value <= 0.0:
        return 0.0
    if value >= 1.0:
        return 1.0
    return value


def hit_probabilities(difficulties: Sequence[float], skill: float) -> np.ndarray:
    """Vectorised :func:`hit_probability` over ``difficulties``."""

    values = np.asarray(difficulties, dtype=float)
    if values.size == 0:
        return np.zeros(0, dtype=float)
    if skill == 0.0:
        return np.where(values == 0.0, 1.0, 0.0)
    trivial = values == 0.0
    safe = np.where(trivial, 1.0, values)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        probabilities = special.erf(skill / (SQRT2 * safe))
    probabilities = np.where(trivial, 1.0, np.nan_to_num(probabilities, nan=0.0))
    return np.clip(probabilities, 0.0, 1.0)


def joint_hit_probabilities(difficulties: np.ndarray, skill: float) -> np.ndarray:
    """Return per-object probabilities for a ``(objects, axes)`` matrix.

    Axes are treated as independent so the per-object probability is the
    product of the per-axis probabilities.
    """

    matrix = np.asarray(difficulties, dtype=float)
    if matrix.ndim == 1:
        return hit_probabilities(matrix, skill)
    if matrix.shape[0] == 0:
        return np.zeros(0, dtype=float)
    per_axis = hit_probabilities(matrix.ravel(), skill).reshape(matrix.shape)
    return np.prod(per_axis, axis=1)
