from __future__ import annotations

import math
from dataclasses import replace

import pytest
from scipy import special

from ppcore.config.loader import merge_overrides
from ppcore.metrics.miss_penalty import MissPenaltyCurve
from ppcore.skills import DEFAULT_RADIUS, ObjectKind

from ppcalc.attributes import MapSettings
from ppcalc.core.cache import AttributesCache
from ppcalc.difficulty import DifficultyCalculator, sanitise_rating
from ppcalc.errors import ConfigurationError, InvalidInputError
from ppcalc.performance import PerformanceCalculator
from ppcalc.settings import DifficultySettings
from tests.helpers import build_feature, build_score, build_stream, build_varied_stream, with_misses


def _map_settings(features, **overrides) -> MapSettings:
    options = {"approach_rate": 9.0, "overall_difficulty": 8.0, "drain_rate": 5.0}
    options.update(overrides)
    return MapSettings.from_features(features, **options)


@pytest.fixture
def calculator() -> DifficultyCalculator:
    return DifficultyCalculator()


def test_default_calculator_produces_finite_attributes(calculator) -> None:
    features = build_varied_stream(120)

    attributes = calculator.calculate(features, _map_settings(features))

    for name in ("aim", "speed", "coordination", "flashlight"):
        value = attributes.rating(name)
        assert math.isfinite(value)
        assert value >= 0.0
    assert attributes.aim_difficulty > 0.0
    assert attributes.speed_difficulty > 0.0
    assert 0.0 < attributes.slider_factor <= 1.0
    assert 0.0 < attributes.speed_note_count <= 120.0
    assert attributes.hit_circle_count == 100
    assert attributes.slider_count == 20
    assert attributes.max_combo == 120
    assert isinstance(attributes.miss_penalty, MissPenaltyCurve)


def test_calculation_is_deterministic(calculator) -> None:
    features = build_varied_stream(60)
    settings = _map_settings(features)

    assert calculator.calculate(features, settings) == calculator.calculate(
        iter(features), settings
    )


def test_empty_map_has_zero_ratings(calculator) -> None:
    attributes = calculator.calculate([], _map_settings([]))

    assert attributes.aim_difficulty == 0.0
    assert attributes.speed_difficulty == 0.0
    assert attributes.coordination_difficulty == 0.0
    assert attributes.flashlight_difficulty == 0.0
    assert attributes.slider_factor == 1.0
    assert attributes.speed_note_count == 0.0
    assert attributes.miss_penalty == MissPenaltyCurve.neutral()


def test_circles_only_map_keeps_slider_factor_at_one(calculator) -> None:
    features = build_stream(50, delta_time=150.0, jump_distance=180.0)

    attributes = calculator.calculate(features, _map_settings(features))

    assert attributes.slider_factor == pytest.approx(1.0)


def test_unordered_features_are_rejected(calculator) -> None:
    features = [build_feature(200.0), build_feature(100.0)]

    with pytest.raises(InvalidInputError) as excinfo:
        calculator.calculate(features, _map_settings(features))

    assert excinfo.value.context["index"] == 1


def test_non_positive_strain_time_is_rejected(calculator) -> None:
    features = [replace(build_feature(0.0), strain_time=0.0)]

    with pytest.raises(InvalidInputError):
        calculator.calculate(features, _map_settings(features))
    with pytest.raises(InvalidInputError):
        calculator.ratings([replace(build_feature(0.0), strain_time=math.nan)])


def test_ratings_report_every_configured_skill(calculator) -> None:
    ratings = calculator.ratings(build_varied_stream(40))

    assert set(ratings) == {"aim", "aim_no_sliders", "speed", "coordination", "flashlight"}
    assert ratings["aim_no_sliders"] <= ratings["aim"]


def test_cache_computes_each_map_once() -> None:
    cache = AttributesCache(maxsize=4)
    calculator = DifficultyCalculator(cache=cache)
    features = build_varied_stream(30)
    settings = _map_settings(features)

    first = calculator.calculate(features, settings, cache_key="map-1")
    second = calculator.calculate(features, settings, cache_key="map-1")

    assert first is second
    assert cache.stats == {"hits": 1, "misses": 1, "size": 1}
    calculator.calculate(features, settings)
    assert cache.stats["size"] == 1


def test_failed_search_is_sanitised_with_warning(calibration, caplog) -> None:
    config = merge_overrides(
        calibration,
        {"skills": {"aim": {"search": {"upper": 1e-6, "max_expansions": 0}}}},
    )
    calculator = DifficultyCalculator.from_config(config)
    features = build_varied_stream(40)
    caplog.set_level("WARNING", logger="ppcalc")

    attributes = calculator.calculate(features, _map_settings(features))

    assert attributes.aim_difficulty == 0.0
    assert attributes.slider_factor == 1.0
    events = [getattr(record, "event", None) for record in caplog.records]
    assert "difficulty.rating_sanitised" in events


def test_sanitise_rating_passes_valid_values() -> None:
    assert sanitise_rating("aim", 1.25) == 1.25
    assert sanitise_rating("aim", math.nan) == 0.0
    assert sanitise_rating("aim", -1.0) == 0.0


def test_miss_penalty_fit_can_be_disabled(calibration) -> None:
    config = merge_overrides(calibration, {"difficulty": {"fit_miss_penalty": False}})
    features = build_varied_stream(30)

    attributes = DifficultyCalculator.from_config(config).calculate(features, _map_settings(features))

    assert attributes.miss_penalty is None


def test_settings_reject_incomplete_skill_tables(calibration) -> None:
    skills = {name: value for name, value in calibration["skills"].items() if name != "speed"}

    with pytest.raises(ConfigurationError) as excinfo:
        DifficultySettings.from_config({"skills": skills})
    assert "speed" in excinfo.value.context["missing"]

    with pytest.raises(ConfigurationError):
        DifficultySettings.from_config(
            merge_overrides(calibration, {"difficulty": {"miss_penalty_skill": "typing"}})
        )


def test_invalid_strategy_surfaces_as_configuration_error(calibration) -> None:
    config = merge_overrides(calibration, {"skills": {"speed": {"strategy": "mystery"}}})

    with pytest.raises(ConfigurationError):
        DifficultyCalculator.from_config(config)


def test_unit_difficulty_map_end_to_end(calibration) -> None:
    # Jumps sized so every object has aim difficulty exactly one.
    strain_time = 200.0
    jump = DEFAULT_RADIUS * strain_time - 100.0
    features = build_stream(100, delta_time=strain_time, jump_distance=jump)
    config = merge_overrides(
        calibration,
        {"skills": {"aim": {"criterion": {"kind": "fc_probability", "probability": 0.5}}}},
    )

    attributes = DifficultyCalculator.from_config(config).calculate(
        features, _map_settings(features, overall_difficulty=7.0)
    )

    expected = math.sqrt(2.0) * float(special.erfinv(0.5 ** 0.01))
    assert attributes.aim_difficulty == pytest.approx(expected, rel=1e-6)
    assert attributes.miss_penalty == MissPenaltyCurve.neutral()

    performance = PerformanceCalculator()
    clean = build_score(attributes, ok=0, meh=0, great=100)
    missed = with_misses(clean, 5)
    assert performance.calculate(attributes, clean).total > 0.0
    assert (
        performance.calculate(attributes, missed).total
        < performance.calculate(attributes, clean).total
    )


def test_map_settings_count_object_kinds() -> None:
    features = build_stream(
        12, kinds=[ObjectKind.CIRCLE, ObjectKind.SLIDER, ObjectKind.SPINNER, ObjectKind.EMPTY]
    )

    settings = _map_settings(features, max_combo=20)

    assert (settings.hit_circle_count, settings.slider_count, settings.spinner_count) == (3, 3, 3)
    assert settings.object_count == 9
    assert settings.resolved_max_combo == 20
