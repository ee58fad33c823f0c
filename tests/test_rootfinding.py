from __future__ import annotations

import math

import pytest

from ppcore.equations.rootfinding import (
    RootResult,
    RootSearch,
    expand_upper_bracket,
    find_root,
    find_root_expand,
)


@pytest.mark.parametrize("method", ["brent", "bisect"])
def test_find_root_refines_sign_change(method: str) -> None:
    result = find_root(lambda x: x * x - 2.0, 0.0, 2.0, method=method)

    assert result.converged
    assert result.reason == "converged"
    assert result.value == pytest.approx(math.sqrt(2.0), abs=1e-9)


def test_find_root_returns_endpoint_roots() -> None:
    assert find_root(lambda x: x, 0.0, 1.0) == RootResult(0.0, True)
    assert find_root(lambda x: x - 1.0, 0.0, 1.0) == RootResult(1.0, True)


def test_find_root_reports_missing_sign_change() -> None:
    result = find_root(lambda x: x + 1.0, 0.0, 1.0)

    assert not result.converged
    assert result.reason == "no_sign_change"
    assert result.resolve(42.0) == 42.0


def test_find_root_reports_nan() -> None:
    result = find_root(lambda x: math.nan, 0.0, 1.0)

    assert not result.converged
    assert result.reason == "nan"


def test_find_root_reports_exhausted_iterations() -> None:
    result = find_root(lambda x: x * x - 2.0, 0.0, 2.0, max_iterations=1)

    assert not result.converged
    assert result.reason == "max_iterations"
    assert math.isfinite(result.value)


def test_expand_upper_bracket_doubles_until_sign_change() -> None:
    bracket = expand_upper_bracket(lambda x: x - 1000.0, 0.0, 1.0)

    assert bracket is not None
    lower, upper = bracket
    assert lower <= 1000.0 <= upper


def test_expand_upper_bracket_respects_budget() -> None:
    assert expand_upper_bracket(lambda x: x - 1000.0, 0.0, 1.0, max_expansions=2) is None


def test_find_root_expand_without_bracket_does_not_converge(caplog) -> None:
    caplog.set_level("DEBUG", logger="ppcore.equations.rootfinding")

    result = find_root_expand(lambda x: -1.0, RootSearch(max_expansions=4))

    assert not result.converged
    assert result.reason == "no_bracket"
    assert math.isnan(result.value)
    assert any(getattr(record, "event", None) == "root.no_bracket" for record in caplog.records)


def test_find_root_expand_locates_distant_root() -> None:
    result = find_root_expand(lambda x: x - 37.5, RootSearch(method="bisect"))

    assert result.converged
    assert result.value == pytest.approx(37.5, abs=1e-8)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"method": "newton"},
        {"lower": 1.0, "upper": 1.0},
        {"max_expansions": -1},
        {"max_iterations": 0},
    ],
)
def test_root_search_rejects_invalid_parameters(kwargs) -> None:
    with pytest.raises(ValueError):
        RootSearch(**kwargs)
