"""Value objects exchanged with the difficulty and performance calculators."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from numbers import Integral, Real
from typing import Any, FrozenSet, Iterable, Mapping, Optional

from ppcore.metrics.deviation import DeviationEstimate
from ppcore.metrics.miss_penalty import MissPenaltyCurve
from ppcore.skills.interfaces import ObjectKind, SupportsTimedFeature

from ppcalc.errors import InvalidInputError

__all__ = [
    "DifficultyAttributes",
    "MapSettings",
    "PerformanceBreakdown",
    "ScoreStatistics",
]


def _require_count(owner: str, name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidInputError(
            f"{owner}.{name} must be an integer",
            context={"field": name, "value": value},
        )
    if value < 0:
        raise InvalidInputError(
            f"{owner}.{name} must be non-negative",
            context={"field": name, "value": value},
        )
    return int(value)


def _require_finite(owner: str, name: str, value: Any, *, minimum: float | None = None) -> float:
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
        raise InvalidInputError(
            f"{owner}.{name} must be a finite number",
            context={"field": name, "value": value},
        )
    if minimum is not None and value < minimum:
        raise InvalidInputError(
            f"{owner}.{name} must be at least {minimum}",
            context={"field": name, "value": value},
        )
    return float(value)


@dataclass(frozen=True, slots=True)
class MapSettings:
    """Map-level constants accompanying a feature stream."""

    approach_rate: float
    overall_difficulty: float
    drain_rate: float
    hit_circle_count: int
    slider_count: int
    spinner_count: int
    max_combo: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("approach_rate", "overall_difficulty", "drain_rate"):
            _require_finite("MapSettings", name, getattr(self, name))
        for name in ("hit_circle_count", "slider_count", "spinner_count"):
            _require_count("MapSettings", name, getattr(self, name))
        if self.max_combo is not None:
            _require_count("MapSettings", "max_combo", self.max_combo)

    @property
    def object_count(self) -> int:
        return self.hit_circle_count + self.slider_count + self.spinner_count

    @property
    def resolved_max_combo(self) -> int:
        return self.object_count if self.max_combo is None else int(self.max_combo)

    @classmethod
    def from_features(
        cls,
        features: Iterable[SupportsTimedFeature],
        *,
        approach_rate: float,
        overall_difficulty: float,
        drain_rate: float,
        max_combo: Optional[int] = None,
    ) -> "MapSettings":
        """Count object kinds in ``features``; empty entries are not counted."""

        counts = {kind: 0 for kind in ObjectKind}
        for feature in features:
            counts[ObjectKind(feature.kind)] += 1
        return cls(
            approach_rate=approach_rate,
            overall_difficulty=overall_difficulty,
            drain_rate=drain_rate,
            hit_circle_count=counts[ObjectKind.CIRCLE],
            slider_count=counts[ObjectKind.SLIDER],
            spinner_count=counts[ObjectKind.SPINNER],
            max_combo=max_combo,
        )


_RATING_FIELDS = (
    "aim_difficulty",
    "speed_difficulty",
    "coordination_difficulty",
    "flashlight_difficulty",
    "slider_factor",
    "speed_note_count",
)
_SETTING_FIELDS = ("approach_rate", "overall_difficulty", "drain_rate")
_COUNT_FIELDS = ("hit_circle_count", "slider_count", "spinner_count", "max_combo")
_MISS_PENALTY_PREFIX = "miss_penalty_"


@dataclass(frozen=True, slots=True)
class DifficultyAttributes:
    """Per-map ratings and metadata; immutable and safe to cache."""

    aim_difficulty: float
    speed_difficulty: float
    coordination_difficulty: float
    flashlight_difficulty: float
    slider_factor: float
    speed_note_count: float
    approach_rate: float
    overall_difficulty: float
    drain_rate: float
    hit_circle_count: int
    slider_count: int
    spinner_count: int
    max_combo: int
    miss_penalty: Optional[MissPenaltyCurve] = None

    def __post_init__(self) -> None:
        for name in _RATING_FIELDS:
            _require_finite("DifficultyAttributes", name, getattr(self, name), minimum=0.0)
        for name in _SETTING_FIELDS:
            _require_finite("DifficultyAttributes", name, getattr(self, name))
        for name in _COUNT_FIELDS:
            _require_count("DifficultyAttributes", name, getattr(self, name))

    @property
    def object_count(self) -> int:
        return self.hit_circle_count + self.slider_count + self.spinner_count

    def rating(self, category: str) -> float:
        return float(getattr(self, f"{category}_difficulty"))

    def as_dict(self) -> dict[str, Any]:
        """Flat record of named numeric fields."""

        payload: dict[str, Any] = {}
        for item in fields(self):
            if item.name == "miss_penalty":
                continue
            payload[item.name] = getattr(self, item.name)
        if self.miss_penalty is not None:
            for key, value in self.miss_penalty.as_dict().items():
                payload[f"{_MISS_PENALTY_PREFIX}{key}"] = value
        return payload

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "DifficultyAttributes":
        """Rebuild attributes from :meth:`as_dict` output."""

        values: dict[str, Any] = {}
        try:
            for name in (*_RATING_FIELDS, *_SETTING_FIELDS):
                values[name] = float(payload[name])
            for name in _COUNT_FIELDS:
                values[name] = int(payload[name])
        except KeyError as exc:
            raise InvalidInputError(
                f"Difficulty attributes payload is missing {exc.args[0]!r}",
                context={"field": exc.args[0]},
            ) from None
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(
                "Difficulty attributes payload holds a non-numeric value",
                context={"error": str(exc)},
            ) from exc

        curve_keys = {
            key[len(_MISS_PENALTY_PREFIX):]: value
            for key, value in payload.items()
            if str(key).startswith(_MISS_PENALTY_PREFIX)
        }
        if curve_keys:
            try:
                values["miss_penalty"] = MissPenaltyCurve.from_mapping(curve_keys)
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidInputError(
                    "Difficulty attributes payload holds an invalid miss penalty curve",
                    context={"error": str(exc)},
                ) from exc
        return cls(**values)


def _normalise_mods(mods: Iterable[str]) -> FrozenSet[str]:
    if isinstance(mods, str):
        mods = [mods]
    return frozenset(str(mod).strip().upper() for mod in mods if str(mod).strip())


@dataclass(frozen=True, slots=True)
class ScoreStatistics:
    """Judgement counts, combo and modifiers of a single play.

    ``accuracy`` defaults to the judgement-weighted accuracy of the counts.
    Modifier tags are upper-cased.
    """

    great: int = 0
    ok: int = 0
    meh: int = 0
    miss: int = 0
    max_combo: int = 0
    accuracy: Optional[float] = None
    mods: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for name in ("great", "ok", "meh", "miss", "max_combo"):
            _require_count("ScoreStatistics", name, getattr(self, name))
        object.__setattr__(self, "mods", _normalise_mods(self.mods))
        if self.accuracy is None:
            object.__setattr__(self, "accuracy", self._judgement_accuracy())
            return
        value = _require_finite("ScoreStatistics", "accuracy", self.accuracy)
        if not 0.0 <= value <= 1.0:
            raise InvalidInputError(
                "ScoreStatistics.accuracy must lie in [0, 1]",
                context={"field": "accuracy", "value": value},
            )
        object.__setattr__(self, "accuracy", value)

    def _judgement_accuracy(self) -> float:
        total = self.total_hits
        if total == 0:
            return 0.0
        weighted = 6 * self.great + 2 * self.ok + self.meh
        return weighted / (6.0 * total)

    @property
    def total_hits(self) -> int:
        return self.great + self.ok + self.meh + self.miss

    @property
    def successful_hits(self) -> int:
        return self.great + self.ok + self.meh

    def has_mod(self, tag: str) -> bool:
        return tag.upper() in self.mods


@dataclass(frozen=True, slots=True)
class PerformanceBreakdown:
    """Per-category values, estimates and the combined total of one play."""

    aim: float
    speed: float
    accuracy: float
    flashlight: float
    coordination: Optional[float]
    effective_miss_count: float
    deviation: DeviationEstimate
    speed_deviation: DeviationEstimate
    total: float

    @classmethod
    def zero(cls, *, include_coordination: bool = False) -> "PerformanceBreakdown":
        undefined = DeviationEstimate.undefined()
        return cls(
            aim=0.0,
            speed=0.0,
            accuracy=0.0,
            flashlight=0.0,
            coordination=0.0 if include_coordination else None,
            effective_miss_count=0.0,
            deviation=undefined,
            speed_deviation=undefined,
            total=0.0,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "aim": self.aim,
            "speed": self.speed,
            "accuracy": self.accuracy,
            "flashlight": self.flashlight,
            "coordination": self.coordination,
            "effective_miss_count": self.effective_miss_count,
            "estimated_unstable_rate": self.deviation.unstable_rate,
            "estimated_speed_unstable_rate": self.speed_deviation.unstable_rate,
            "total": self.total,
        }
