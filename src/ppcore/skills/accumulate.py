"""Fold drivers running skill strategies over a feature stream."""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Iterable, Iterator, Mapping, Sequence, Tuple

from ppcore.skills.interfaces import SkillStrategy, SupportsTimedFeature

__all__ = ["SkillAccumulator", "accumulate", "accumulate_many", "fold_states"]


def _with_lookahead(
    features: Iterable[SupportsTimedFeature],
) -> Iterator[Tuple[SupportsTimedFeature, SupportsTimedFeature | None]]:
    iterator = iter(features)
    try:
        current = next(iterator)
    except StopIteration:
        return
    for upcoming in iterator:
        yield current, upcoming
        current = upcoming
    yield current, None


def fold_states(
    strategies: Sequence[SkillStrategy],
    features: Iterable[SupportsTimedFeature],
) -> list[Any]:
    """Fold every strategy over ``features`` in a single ordered pass.

    Each strategy sees its own bounded history window.  The final states are
    returned in the order of ``strategies``.
    """

    states = [strategy.initial_state() for strategy in strategies]
    histories: list[Deque[SupportsTimedFeature]] = [
        deque(maxlen=max(0, int(strategy.history_length))) for strategy in strategies
    ]
    for feature, lookahead in _with_lookahead(features):
        for index, strategy in enumerate(strategies):
            history = histories[index]
            states[index] = strategy.process(
                states[index], feature, tuple(history), lookahead
            )
            if history.maxlen:
                history.append(feature)
    return states


def accumulate(strategy: SkillStrategy, features: Iterable[SupportsTimedFeature]) -> float:
    """Return the rating of ``strategy`` over ``features``."""

    (state,) = fold_states([strategy], features)
    return float(strategy.value(state))


def accumulate_many(
    strategies: Mapping[str, SkillStrategy],
    features: Iterable[SupportsTimedFeature],
) -> dict[str, float]:
    """Return one rating per named strategy from a single pass."""

    names = list(strategies)
    states = fold_states([strategies[name] for name in names], features)
    return {
        name: float(strategies[name].value(state)) for name, state in zip(names, states)
    }


class SkillAccumulator:
    """Streaming wrapper owning the state of one strategy.

    Features are buffered by one entry so the strategy receives its
    lookahead; :meth:`value` flushes the pending feature before solving.
    """

    __slots__ = ("strategy", "_state", "_history", "_pending")

    def __init__(self, strategy: SkillStrategy) -> None:
        self.strategy = strategy
        self._state = strategy.initial_state()
        self._history: Deque[SupportsTimedFeature] = deque(
            maxlen=max(0, int(strategy.history_length))
        )
        self._pending: SupportsTimedFeature | None = None

    @property
    def state(self) -> Any:
        self._flush()
        return self._state

    def _advance(self, lookahead: SupportsTimedFeature | None) -> None:
        feature = self._pending
        if feature is None:
            return
        self._state = self.strategy.process(
            self._state, feature, tuple(self._history), lookahead
        )
        if self._history.maxlen:
            self._history.append(feature)
        self._pending = None

    def _flush(self) -> None:
        self._advance(None)

    def process(self, feature: SupportsTimedFeature) -> None:
        self._advance(feature)
        self._pending = feature

    def value(self) -> float:
        self._flush()
        return float(self.strategy.value(self._state))
