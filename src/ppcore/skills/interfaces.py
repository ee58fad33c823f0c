"""Structural typing interfaces for feature streams and skill strategies.

A map is consumed as an ordered stream of :class:`TimedFeature` entries
produced by an external preprocessing step.  Skill strategies fold over that
stream with an explicit state object, which keeps every accumulator free of
hidden mutable attributes and lets independent categories run side by side.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Sequence, runtime_checkable

__all__ = [
    "DEFAULT_RADIUS",
    "ObjectKind",
    "TimedFeature",
    "SupportsTimedFeature",
    "SkillStrategy",
]


# Radius of a circle at circle size 4 in playfield units.
DEFAULT_RADIUS = 36.48


class ObjectKind(str, Enum):
    """Gameplay object categories relevant to the skills."""

    CIRCLE = "circle"
    SLIDER = "slider"
    SPINNER = "spinner"
    EMPTY = "empty"

    @property
    def is_trivial(self) -> bool:
        return self in (ObjectKind.SPINNER, ObjectKind.EMPTY)


@runtime_checkable
class SupportsTimedFeature(Protocol):
    """Per-object feature payload consumed by the skill evaluators."""

    start_time: float
    delta_time: float
    strain_time: float
    jump_distance: float
    travel_distance: float
    angle: float | None
    kind: ObjectKind
    radius: float


@dataclass(frozen=True, slots=True)
class TimedFeature:
    """Immutable geometric and timing summary of one gameplay object.

    ``strain_time`` is ``delta_time`` clamped from below by the producer so
    very fast patterns do not divide by near-zero gaps.  ``travel_distance``
    is the distance covered while following the previous slider.
    """

    start_time: float
    delta_time: float
    strain_time: float
    jump_distance: float = 0.0
    travel_distance: float = 0.0
    angle: float | None = None
    kind: ObjectKind = ObjectKind.CIRCLE
    radius: float = DEFAULT_RADIUS


@runtime_checkable
class SkillStrategy(Protocol):
    """Streaming reducer yielding one rating for a skill category.

    ``process`` receives the state returned by the previous call, the
    current feature, up to ``history_length`` previously processed features
    (most recent last) and an optional lookahead feature.
    """

    name: str
    history_length: int

    def initial_state(self) -> Any: ...

    def process(
        self,
        state: Any,
        feature: SupportsTimedFeature,
        history: Sequence[SupportsTimedFeature],
        lookahead: SupportsTimedFeature | None = None,
    ) -> Any: ...

    def value(self, state: Any) -> float: ...
