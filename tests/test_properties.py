from __future__ import annotations

import math

import pytest

pytest.importorskip("hypothesis")
from hypothesis import given, settings
from hypothesis import strategies as st

from ppcore.equations.hit_probability import hit_probability
from ppcore.metrics.deviation import estimate_deviation
from ppcore.metrics.miss_penalty import MissPenaltyCurve, order_statistic_ratio

from ppcalc.performance import PerformanceCalculator
from tests.helpers import add_misses, build_attributes, build_score, with_misses

_CALCULATOR = PerformanceCalculator()

_difficulty = st.floats(min_value=0.0, max_value=1e3, allow_nan=False)
_skill = st.floats(min_value=0.0, max_value=1e3, allow_nan=False)


@given(difficulty=_difficulty, skill=_skill, extra=st.floats(min_value=0.0, max_value=10.0))
def test_hit_probability_is_bounded_and_monotone(difficulty: float, skill: float, extra: float) -> None:
    value = hit_probability(difficulty, skill)

    assert 0.0 <= value <= 1.0
    assert hit_probability(difficulty, skill + extra) >= value


@given(
    object_count=st.integers(min_value=1, max_value=2000),
    misses=st.floats(min_value=0.0, max_value=50.0),
    step=st.floats(min_value=0.0, max_value=5.0),
)
def test_order_statistic_ratio_is_non_increasing(
    object_count: int, misses: float, step: float
) -> None:
    current = order_statistic_ratio(misses, object_count)

    assert 0.0 <= current <= 1.0
    assert order_statistic_ratio(misses + step, object_count) <= current + 1e-12


@given(
    alpha=st.floats(min_value=0.1, max_value=20.0),
    beta=st.floats(min_value=0.1, max_value=20.0),
    total_error=st.floats(min_value=0.0, max_value=5.0),
    object_count=st.integers(min_value=2, max_value=1000),
)
def test_fitted_curve_starts_at_one_and_never_rises(
    alpha: float, beta: float, total_error: float, object_count: int
) -> None:
    curve = MissPenaltyCurve(alpha=alpha, beta=beta, total_error=total_error)
    ratios = [curve.skill_ratio(misses, object_count) for misses in (0.0, 0.5, 1.0, 2.0, 7.0)]

    assert ratios[0] == 1.0
    assert all(later <= earlier + 1e-12 for earlier, later in zip(ratios, ratios[1:]))


@given(
    great=st.integers(min_value=1, max_value=1000),
    eligible=st.integers(min_value=1, max_value=1000),
    window=st.floats(min_value=1.0, max_value=80.0),
)
def test_deviation_estimates_are_positive(great: int, eligible: int, window: float) -> None:
    estimate = estimate_deviation(great, eligible, window)

    assert estimate.is_value
    assert math.isfinite(estimate.value) and estimate.value > 0.0


@settings(max_examples=25, deadline=None)
@given(misses=st.integers(min_value=0, max_value=40), extra=st.integers(min_value=1, max_value=10))
def test_total_never_rises_with_more_misses(misses: int, extra: int) -> None:
    attributes = build_attributes()
    score = build_score(attributes)

    fewer = _CALCULATOR.calculate(attributes, with_misses(score, misses))
    more = _CALCULATOR.calculate(attributes, with_misses(score, misses + extra))

    assert more.total <= fewer.total


@settings(max_examples=25, deadline=None)
@given(
    misses=st.integers(min_value=0, max_value=40),
    extra=st.integers(min_value=1, max_value=10),
    mods=st.sets(st.sampled_from(["HD", "BL", "FL", "NF", "SO"])),
)
def test_added_misses_never_raise_any_category(misses: int, extra: int, mods: set[str]) -> None:
    attributes = build_attributes()
    score = build_score(attributes, mods=frozenset(mods))

    fewer = _CALCULATOR.calculate(attributes, add_misses(score, misses))
    more = _CALCULATOR.calculate(attributes, add_misses(score, misses + extra))

    for name in ("aim", "speed", "accuracy", "flashlight", "total"):
        assert getattr(more, name) <= getattr(fewer, name)
