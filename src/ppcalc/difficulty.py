"""Per-map difficulty attributes from a feature stream."""

from __future__ import annotations

import logging
import math
from typing import Any, Hashable, Iterable, Iterator, Mapping

from ppcore.config.loader import load_calibration
from ppcore.metrics.miss_penalty import MissPenaltyCurve, fit_miss_penalty_curve
from ppcore.skills.accumulate import fold_states
from ppcore.skills.interfaces import SkillStrategy, SupportsTimedFeature

from ppcalc.attributes import DifficultyAttributes, MapSettings
from ppcalc.core.cache import AttributesCache
from ppcalc.errors import InvalidInputError
from ppcalc.settings import DifficultySettings

__all__ = ["DifficultyCalculator", "sanitise_rating"]

logger = logging.getLogger(__name__)


def sanitise_rating(name: str, value: float) -> float:
    """Return ``value`` when it is a non-negative finite number, else 0."""

    rating = float(value)
    if math.isfinite(rating) and rating >= 0.0:
        return rating
    logger.warning(
        "Replacing invalid rating with zero",
        extra={"event": "difficulty.rating_sanitised", "skill": name, "value": repr(rating)},
    )
    return 0.0


def _checked(features: Iterable[SupportsTimedFeature]) -> Iterator[SupportsTimedFeature]:
    previous = -math.inf
    for index, feature in enumerate(features):
        start = float(feature.start_time)
        if not math.isfinite(start) or start < previous:
            raise InvalidInputError(
                "Features must be ordered by start time",
                context={"index": index, "start_time": start, "previous": previous},
            )
        strain_time = float(feature.strain_time)
        if not (math.isfinite(strain_time) and strain_time > 0.0):
            raise InvalidInputError(
                "Feature strain_time must be a positive finite number",
                context={"index": index, "strain_time": strain_time},
            )
        previous = start
        yield feature


class DifficultyCalculator:
    """Fold every configured skill over a map in a single ordered pass.

    ``slider_factor`` compares the aim rating with and without slider
    travel, ``speed_note_count`` comes from the speed strain history and the
    miss penalty curve is fitted to the per-object difficulties of
    ``DifficultySettings.miss_penalty_skill``.
    """

    def __init__(
        self,
        settings: DifficultySettings | None = None,
        *,
        cache: AttributesCache | None = None,
    ) -> None:
        self.settings = settings or DifficultySettings.from_config(load_calibration())
        self.cache = cache
        self._strategies: dict[str, SkillStrategy] = self.settings.build_strategies()

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], *, cache: AttributesCache | None = None
    ) -> "DifficultyCalculator":
        return cls(DifficultySettings.from_config(config), cache=cache)

    @property
    def strategies(self) -> Mapping[str, SkillStrategy]:
        return dict(self._strategies)

    def calculate(
        self,
        features: Iterable[SupportsTimedFeature],
        map_settings: MapSettings,
        *,
        cache_key: Hashable | None = None,
    ) -> DifficultyAttributes:
        """Return the attributes of one map.

        When both ``cache_key`` and a cache are present the attributes are
        computed at most once per key.
        """

        if cache_key is not None and self.cache is not None:
            items = list(features)
            return self.cache.get_or_compute(
                cache_key, lambda: self._calculate(items, map_settings)
            )
        return self._calculate(features, map_settings)

    def ratings(self, features: Iterable[SupportsTimedFeature]) -> dict[str, float]:
        """Raw rating of every configured skill, without sanitising."""

        names = list(self._strategies)
        states = fold_states([self._strategies[name] for name in names], _checked(features))
        return {
            name: float(self._strategies[name].value(state)) for name, state in zip(names, states)
        }

    def _calculate(
        self, features: Iterable[SupportsTimedFeature], map_settings: MapSettings
    ) -> DifficultyAttributes:
        names = list(self._strategies)
        strategies = [self._strategies[name] for name in names]
        states = dict(zip(names, fold_states(strategies, _checked(features))))

        ratings = {
            name: sanitise_rating(name, self._strategies[name].value(state))
            for name, state in states.items()
        }

        aim = ratings["aim"]
        slider_factor = ratings["aim_no_sliders"] / aim if aim > 0.0 else 1.0

        speed = self._strategies["speed"]
        note_count = getattr(speed, "relevant_note_count", None)
        speed_note_count = float(note_count(states["speed"])) if note_count else 0.0

        attributes = DifficultyAttributes(
            aim_difficulty=aim,
            speed_difficulty=ratings["speed"],
            coordination_difficulty=ratings["coordination"],
            flashlight_difficulty=ratings["flashlight"],
            slider_factor=sanitise_rating("slider_factor", slider_factor),
            speed_note_count=sanitise_rating("speed_note_count", speed_note_count),
            approach_rate=map_settings.approach_rate,
            overall_difficulty=map_settings.overall_difficulty,
            drain_rate=map_settings.drain_rate,
            hit_circle_count=map_settings.hit_circle_count,
            slider_count=map_settings.slider_count,
            spinner_count=map_settings.spinner_count,
            max_combo=map_settings.resolved_max_combo,
            miss_penalty=self._miss_penalty(states),
        )
        logger.debug(
            "Computed difficulty attributes",
            extra={
                "event": "difficulty.calculated",
                "objects": map_settings.object_count,
                "ratings": ratings,
            },
        )
        return attributes

    def _miss_penalty(self, states: Mapping[str, Any]) -> MissPenaltyCurve | None:
        if not self.settings.fit_miss_penalty:
            return None
        name = self.settings.miss_penalty_skill
        difficulties = getattr(self._strategies[name], "object_difficulties", None)
        if difficulties is None:
            return None
        return fit_miss_penalty_curve(difficulties(states[name]))
