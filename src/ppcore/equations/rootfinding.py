"""Bounded one-dimensional root searches with explicit convergence results."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Literal

from scipy import optimize

__all__ = [
    "DEFAULT_MAX_EXPANSIONS",
    "DEFAULT_MAX_ITERATIONS",
    "RootResult",
    "RootSearch",
    "expand_upper_bracket",
    "find_root",
    "find_root_expand",
]

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXPANSIONS = 64
DEFAULT_MAX_ITERATIONS = 100

Method = Literal["brent", "bisect"]
_SOLVERS: dict[str, Callable[..., tuple[float, optimize.RootResults]]] = {
    "brent": optimize.brentq,
    "bisect": optimize.bisect,
}


@dataclass(frozen=True, slots=True)
class RootResult:
    """Outcome of a bounded root search.

    ``converged`` is ``False`` whenever the bracket could not be established
    or the refinement exhausted its iteration budget; ``value`` then holds
    the best estimate (or ``nan`` when no bracket was found) and callers
    resolve the documented fallback themselves.
    """

    value: float
    converged: bool
    iterations: int = 0
    reason: str = "converged"

    def resolve(self, fallback: float) -> float:
        """Return the root when converged, otherwise ``fallback``."""

        return self.value if self.converged else fallback


@dataclass(frozen=True, slots=True)
class RootSearch:
    """Search parameters shared by the skill solvers."""

    method: Method = "brent"
    lower: float = 0.0
    upper: float = 1.0
    max_expansions: int = DEFAULT_MAX_EXPANSIONS
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    xtol: float = 1e-12
    rtol: float = 1e-10

    def __post_init__(self) -> None:
        if self.method not in _SOLVERS:
            raise ValueError(f"Unknown root search method: {self.method!r}")
        if not self.upper > self.lower:
            raise ValueError("upper bound must exceed the lower bound")
        if self.max_expansions < 0 or self.max_iterations <= 0:
            raise ValueError("root search budgets must be positive")


def find_root(
    function: Callable[[float], float],
    lower: float,
    upper: float,
    *,
    method: Method = "brent",
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    xtol: float = 1e-12,
    rtol: float = 1e-10,
) -> RootResult:
    """Refine a root inside ``[lower, upper]`` whose endpoints change sign."""

    f_lower = float(function(lower))
    if f_lower == 0.0:
        return RootResult(float(lower), True)
    f_upper = float(function(upper))
    if f_upper == 0.0:
        return RootResult(float(upper), True)
    if math.isnan(f_lower) or math.isnan(f_upper):
        return RootResult(math.nan, False, reason="nan")
    if (f_lower < 0.0) == (f_upper < 0.0):
        return RootResult(math.nan, False, reason="no_sign_change")

    solver = _SOLVERS[method]
    root, details = solver(
        function,
        lower,
        upper,
        xtol=xtol,
        rtol=rtol,
        maxiter=max_iterations,
        full_output=True,
        disp=False,
    )
    if not details.converged:
        logger.debug(
            "Root refinement exhausted its budget",
            extra={
                "event": "root.not_converged",
                "method": method,
                "iterations": details.iterations,
            },
        )
        return RootResult(float(root), False, details.iterations, "max_iterations")
    return RootResult(float(root), True, details.iterations)


def expand_upper_bracket(
    function: Callable[[float], float],
    lower: float,
    upper: float,
    *,
    max_expansions: int = DEFAULT_MAX_EXPANSIONS,
) -> tuple[float, float] | None:
    """Grow ``upper`` geometrically until ``function`` changes sign.

    The lower bound stays fixed because skill levels are non-negative.
    Returns ``None`` when the budget is exhausted without a sign change.
    """

    f_lower = float(function(lower))
    if math.isnan(f_lower):
        return None
    width = upper - lower
    current_lower, current_upper = lower, upper
    for _ in range(max_expansions + 1):
        f_upper = float(function(current_upper))
        if math.isnan(f_upper):
            return None
        if f_upper == 0.0 or (f_upper < 0.0) != (f_lower < 0.0):
            return current_lower, current_upper
        current_lower, f_lower = current_upper, f_upper
        width *= 2.0
        current_upper = current_lower + width
        if not math.isfinite(current_upper):
            return None
    return None


def find_root_expand(
    function: Callable[[float], float],
    search: RootSearch | None = None,
) -> RootResult:
    """Expand the bracket from ``search`` upwards and refine the root."""

    params = search or RootSearch()
    if float(function(params.lower)) == 0.0:
        return RootResult(float(params.lower), True)
    bracket = expand_upper_bracket(
        function,
        params.lower,
        params.upper,
        max_expansions=params.max_expansions,
    )
    if bracket is None:
        logger.debug(
            "Root bracket could not be established",
            extra={
                "event": "root.no_bracket",
                "max_expansions": params.max_expansions,
            },
        )
        return RootResult(math.nan, False, reason="no_bracket")
    return find_root(
        function,
        bracket[0],
        bracket[1],
        method=params.method,
        max_iterations=params.max_iterations,
        xtol=params.xtol,
        rtol=params.rtol,
    )
