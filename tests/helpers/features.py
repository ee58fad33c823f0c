"""Builders for synthetic feature streams."""

from __future__ import annotations

from typing import List, Sequence

from ppcore.skills.interfaces import DEFAULT_RADIUS, ObjectKind, TimedFeature


def build_feature(
    start_time: float,
    *,
    delta_time: float = 200.0,
    jump_distance: float = 120.0,
    travel_distance: float = 0.0,
    kind: ObjectKind = ObjectKind.CIRCLE,
    radius: float = DEFAULT_RADIUS,
    angle: float | None = None,
) -> TimedFeature:
    return TimedFeature(
        start_time=start_time,
        delta_time=delta_time,
        strain_time=max(25.0, delta_time),
        jump_distance=jump_distance,
        travel_distance=travel_distance,
        angle=angle,
        kind=kind,
        radius=radius,
    )


def build_stream(
    count: int,
    *,
    delta_time: float = 200.0,
    jump_distance: float = 120.0,
    kinds: Sequence[ObjectKind] | None = None,
    travel_distance: float = 0.0,
) -> List[TimedFeature]:
    """Evenly spaced stream; ``kinds`` cycles when shorter than ``count``."""

    pattern = list(kinds) if kinds else [ObjectKind.CIRCLE]
    return [
        build_feature(
            index * delta_time,
            delta_time=delta_time,
            jump_distance=jump_distance,
            travel_distance=travel_distance if pattern[index % len(pattern)] is ObjectKind.SLIDER else 0.0,
            kind=pattern[index % len(pattern)],
        )
        for index in range(count)
    ]


def build_varied_stream(count: int, *, seed_spacing: float = 180.0) -> List[TimedFeature]:
    """Deterministic stream mixing short and long jumps and a few sliders."""

    features: List[TimedFeature] = []
    start = 0.0
    for index in range(count):
        delta = seed_spacing + 40.0 * ((index * 7) % 5)
        start += delta
        kind = ObjectKind.SLIDER if index % 6 == 5 else ObjectKind.CIRCLE
        features.append(
            build_feature(
                start,
                delta_time=delta,
                jump_distance=20.0 + 45.0 * ((index * 3) % 8),
                travel_distance=60.0 if kind is ObjectKind.SLIDER else 0.0,
                kind=kind,
            )
        )
    return features
