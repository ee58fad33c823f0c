"""Builders for difficulty attributes and score statistics."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ppcore.metrics.miss_penalty import MissPenaltyCurve

from ppcalc.attributes import DifficultyAttributes, ScoreStatistics


def build_attributes(**overrides: Any) -> DifficultyAttributes:
    """Attributes of a mid-difficulty map with 500 circles and 100 sliders."""

    base = DifficultyAttributes(
        aim_difficulty=0.18,
        speed_difficulty=0.16,
        coordination_difficulty=0.12,
        flashlight_difficulty=1.4,
        slider_factor=0.95,
        speed_note_count=320.0,
        approach_rate=9.3,
        overall_difficulty=8.5,
        drain_rate=5.0,
        hit_circle_count=500,
        slider_count=100,
        spinner_count=2,
        max_combo=820,
        miss_penalty=MissPenaltyCurve(alpha=2.5, beta=4.0, total_error=0.8),
    )
    return replace(base, **overrides)


def build_score(attributes: DifficultyAttributes | None = None, **overrides: Any) -> ScoreStatistics:
    """Full-combo score on ``attributes`` with a handful of oks."""

    attributes = attributes or build_attributes()
    objects = attributes.object_count
    values: dict[str, Any] = {
        "great": objects - 12,
        "ok": 10,
        "meh": 2,
        "miss": 0,
        "max_combo": attributes.max_combo,
        "mods": frozenset(),
    }
    values.update(overrides)
    return ScoreStatistics(**values)


def with_misses(score: ScoreStatistics, misses: int) -> ScoreStatistics:
    """Turn ``misses`` greats into misses, keeping the hit total fixed."""

    return replace(score, great=score.great - misses, miss=score.miss + misses, accuracy=None)


def add_misses(score: ScoreStatistics, misses: int) -> ScoreStatistics:
    """Add ``misses`` on top of the existing judgements."""

    return replace(score, miss=score.miss + misses, accuracy=None)
