from __future__ import annotations

import math

import numpy as np
import pytest

from ppcore.equations.order_statistics import steady_skill_ratio
from ppcore.metrics.miss_penalty import (
    MissPenaltyCurve,
    fit_miss_penalty_curve,
    miss_penalty_errors,
    monotone_ratio,
    order_statistic_ratio,
)


def _mixed_difficulties(count: int = 200) -> list[float]:
    # A handful of hard jumps on top of an easy background.
    values = [0.2 + 0.01 * (index % 7) for index in range(count)]
    for index in range(0, count, 25):
        values[index] = 2.5
    return values


def test_neutral_curve_has_no_error_mass() -> None:
    curve = MissPenaltyCurve.neutral()

    assert curve.is_neutral
    assert curve.as_dict() == {"alpha": 1.0, "beta": 1.0, "total_error": 0.0}
    assert curve.error_mass(np.arange(5.0), 100).tolist() == [0.0] * 5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"alpha": 0.0, "beta": 1.0, "total_error": 0.0},
        {"alpha": 1.0, "beta": -2.0, "total_error": 0.0},
        {"alpha": 1.0, "beta": 1.0, "total_error": -0.5},
        {"alpha": 1.0, "beta": 1.0, "total_error": math.inf},
    ],
)
def test_curve_rejects_invalid_parameters(kwargs) -> None:
    with pytest.raises(ValueError):
        MissPenaltyCurve(**kwargs)


def test_curve_round_trips_through_mapping() -> None:
    curve = MissPenaltyCurve(alpha=2.5, beta=4.0, total_error=0.8)

    assert MissPenaltyCurve.from_mapping(curve.as_dict()) == curve
    assert MissPenaltyCurve.from_mapping({"alpha": 2, "beta": 3}).total_error == 0.0


def test_monotone_ratio_enforces_shape() -> None:
    # A noisy raw curve that briefly rises after dropping.
    raw = np.array([0.7, 0.9, 0.6, 0.8, 0.3])

    def ratio_at(grid: np.ndarray) -> np.ndarray:
        return raw[: grid.size]

    assert monotone_ratio(ratio_at, 0.0, 10) == 1.0
    assert monotone_ratio(ratio_at, 1.0, 10) == pytest.approx(0.9)
    assert monotone_ratio(ratio_at, 3.0, 10) == pytest.approx(0.6)
    assert monotone_ratio(ratio_at, 1.5, 10) == pytest.approx(0.75)
    assert monotone_ratio(ratio_at, 2.0, 0) == 1.0


def test_monotone_ratio_clamps_misses_to_object_count() -> None:
    def ratio_at(grid: np.ndarray) -> np.ndarray:
        return 1.0 - grid / 4.0

    assert monotone_ratio(ratio_at, 40.0, 4) == 0.0
    assert monotone_ratio(ratio_at, 40.0, 4) == monotone_ratio(ratio_at, 4.0, 4)


def test_order_statistic_ratio_is_non_increasing() -> None:
    ratios = [order_statistic_ratio(misses, 300) for misses in np.arange(0.0, 30.0, 0.5)]

    assert ratios[0] == 1.0
    assert all(later <= earlier + 1e-12 for earlier, later in zip(ratios, ratios[1:]))
    assert all(0.0 <= value <= 1.0 for value in ratios)
    assert order_statistic_ratio(3.0, 300) == pytest.approx(float(steady_skill_ratio(300, 3.0)))


def test_errors_vanish_for_uniform_difficulties() -> None:
    errors = miss_penalty_errors([0.8] * 150)

    assert errors.shape == (149,)
    assert np.allclose(errors, 0.0, atol=1e-12)


def test_errors_skip_invalid_difficulties() -> None:
    assert miss_penalty_errors([]).size == 0
    assert miss_penalty_errors([1.0]).size == 0
    assert miss_penalty_errors([math.nan, 1.0, math.inf]).size == 0
    assert np.allclose(miss_penalty_errors([-1.0, 0.0, 0.0]), 0.0)


@pytest.mark.parametrize("difficulties", [[], [1.3], [0.0] * 20, [0.45] * 300])
def test_degenerate_maps_fit_neutral_curve(difficulties) -> None:
    curve = fit_miss_penalty_curve(difficulties)

    assert curve == MissPenaltyCurve.neutral()
    for misses in (0.0, 1.0, 7.5):
        assert curve.skill_ratio(misses, 300) == pytest.approx(order_statistic_ratio(misses, 300))


def test_mixed_map_fits_informative_curve() -> None:
    curve = fit_miss_penalty_curve(_mixed_difficulties())

    assert not curve.is_neutral
    assert curve.alpha > 0.0 and curve.beta > 0.0
    assert math.isfinite(curve.alpha) and math.isfinite(curve.beta)
    assert curve.total_error > 0.0


def test_mixed_map_penalises_misses_more_than_uniform_map() -> None:
    curve = fit_miss_penalty_curve(_mixed_difficulties())

    assert curve.skill_ratio(0.0, 200) == 1.0
    ratios = [curve.skill_ratio(misses, 200) for misses in range(0, 12)]
    assert all(later <= earlier for earlier, later in zip(ratios, ratios[1:]))
    for misses in (1.0, 3.0, 8.0):
        assert curve.skill_ratio(misses, 200) <= order_statistic_ratio(misses, 200) + 1e-12


def test_error_mass_is_zero_without_misses() -> None:
    curve = MissPenaltyCurve(alpha=2.5, beta=4.0, total_error=0.8)
    mass = curve.error_mass([0.0, 1.0, 2.0], 100)

    assert mass[0] == 0.0
    assert np.all(mass >= 0.0)
    assert curve.error_mass(3.0, 1).tolist() == [0.0]
