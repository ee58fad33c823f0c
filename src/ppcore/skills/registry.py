"""Build skill strategies from calibration mappings.

Strategies are selected by name from configuration rather than by
subclassing.  A skill entry looks like::

    aim:
      strategy: threshold
      evaluator: aim
      criterion: {kind: expected_misses, misses: 1}
      search: {method: brent, max_expansions: 64}
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from typing import Any, Callable, Mapping

from ppcore.equations.rootfinding import RootSearch
from ppcore.skills.coordination import CoordinationSkill
from ppcore.skills.evaluators import (
    AimEvaluator,
    Evaluator,
    FlashlightEvaluator,
    SpeedEvaluator,
)
from ppcore.skills.interfaces import SkillStrategy
from ppcore.skills.strain import (
    DEFAULT_DECAY_BASE,
    DEFAULT_MAX_DECAY_GAP,
    StrainDecaySkill,
)
from ppcore.skills.threshold import (
    Criterion,
    ExpectedMisses,
    FullComboProbability,
    MissProbability,
    ThresholdSkill,
)

__all__ = [
    "build_criterion",
    "build_evaluator",
    "build_search",
    "build_strategy",
    "build_strategies",
    "strategy_names",
]


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, MappingABC):
        raise TypeError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _float(payload: Mapping[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{key}' must be numeric, got {value!r}") from exc


def _int(payload: Mapping[str, Any], key: str, default: int) -> int:
    value = payload.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{key}' must be an integer, got {value!r}") from exc


def build_search(payload: Mapping[str, Any] | None) -> RootSearch:
    options = payload or {}
    return RootSearch(
        method=str(options.get("method", "brent")),  # type: ignore[arg-type]
        lower=_float(options, "lower", 0.0),
        upper=_float(options, "upper", 1.0),
        max_expansions=_int(options, "max_expansions", 64),
        max_iterations=_int(options, "max_iterations", 100),
    )


def _fc_probability(options: Mapping[str, Any]) -> Criterion:
    return FullComboProbability(
        probability=_float(options, "probability", 0.5),
        fallback=_float(options, "fallback", 0.0),
    )


def _expected_misses(options: Mapping[str, Any]) -> Criterion:
    return ExpectedMisses(
        misses=_float(options, "misses", 1.0),
        fallback=_float(options, "fallback", float("inf")),
    )


def _miss_probability(options: Mapping[str, Any]) -> Criterion:
    return MissProbability(
        misses=_float(options, "misses", 1.0),
        probability=_float(options, "probability", 0.5),
        fallback=_float(options, "fallback", float("inf")),
        distribution=str(options.get("distribution", "normal")).strip().lower(),
    )


_CRITERIA: Mapping[str, Callable[[Mapping[str, Any]], Criterion]] = {
    "fc_probability": _fc_probability,
    "expected_misses": _expected_misses,
    "miss_probability": _miss_probability,
}


def build_criterion(payload: Mapping[str, Any] | None, default: str) -> Criterion:
    options = payload or {}
    kind = str(options.get("kind", default))
    try:
        factory = _CRITERIA[kind]
    except KeyError:
        raise ValueError(f"Unknown threshold criterion: {kind!r}") from None
    return factory(options)


def _aim_evaluator(options: Mapping[str, Any]) -> Evaluator:
    return AimEvaluator(
        intercept=_float(options, "intercept", 100.0),
        include_sliders=bool(options.get("include_sliders", True)),
    )


def _flashlight_evaluator(options: Mapping[str, Any]) -> Evaluator:
    return FlashlightEvaluator(
        visible_radius=_float(options, "visible_radius", 200.0),
        aim=_aim_evaluator(options),
    )


_EVALUATORS: Mapping[str, Callable[[Mapping[str, Any]], Evaluator]] = {
    "aim": _aim_evaluator,
    "speed": lambda options: SpeedEvaluator(),
    "flashlight": _flashlight_evaluator,
}


def build_evaluator(name: str, options: Mapping[str, Any]) -> Evaluator:
    try:
        factory = _EVALUATORS[name]
    except KeyError:
        raise ValueError(f"Unknown evaluator: {name!r}") from None
    return factory(options)


def _threshold(name: str, options: Mapping[str, Any]) -> SkillStrategy:
    return ThresholdSkill(
        name=name,
        evaluator=build_evaluator(str(options.get("evaluator", name)), options),
        criterion=build_criterion(_section(options, "criterion"), "expected_misses"),
        search=build_search(_section(options, "search")),
        history_length=_int(options, "history_length", 1),
    )


def _strain_decay(name: str, options: Mapping[str, Any]) -> SkillStrategy:
    return StrainDecaySkill(
        name=name,
        evaluator=build_evaluator(str(options.get("evaluator", "speed")), options),
        decay_base=_float(options, "decay_base", DEFAULT_DECAY_BASE),
        max_decay_gap=_float(options, "max_decay_gap", DEFAULT_MAX_DECAY_GAP),
        history_length=_int(options, "history_length", 2),
    )


def _coordination(name: str, options: Mapping[str, Any]) -> SkillStrategy:
    return CoordinationSkill(
        name=name,
        criterion=build_criterion(_section(options, "criterion"), "fc_probability"),
        search=build_search(_section(options, "search")),
        final_velocity=_float(options, "final_velocity", 0.0),
        history_length=_int(options, "history_length", 1),
    )


_STRATEGIES: Mapping[str, Callable[[str, Mapping[str, Any]], SkillStrategy]] = {
    "threshold": _threshold,
    "strain_decay": _strain_decay,
    "coordination": _coordination,
}


def strategy_names() -> tuple[str, ...]:
    return tuple(_STRATEGIES)


def build_strategy(name: str, options: Mapping[str, Any]) -> SkillStrategy:
    """Instantiate the strategy declared by ``options['strategy']``."""

    if not isinstance(options, MappingABC):
        raise TypeError(f"Skill '{name}' must be configured with a mapping")
    kind = str(options.get("strategy", ""))
    try:
        factory = _STRATEGIES[kind]
    except KeyError:
        raise ValueError(
            f"Unknown skill strategy for '{name}': {kind!r} "
            f"(expected one of {', '.join(strategy_names())})"
        ) from None
    return factory(name, options)


def build_strategies(payload: Mapping[str, Any]) -> dict[str, SkillStrategy]:
    """Instantiate every skill declared in ``payload``, keyed by name."""

    return {str(name): build_strategy(str(name), options) for name, options in payload.items()}
