"""Typed views over calibration mappings."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from ppcore.config.loader import freeze_mapping
from ppcore.skills.interfaces import SkillStrategy
from ppcore.skills.registry import build_strategies

from ppcalc.errors import ConfigurationError

__all__ = [
    "CATEGORIES",
    "REQUIRED_SKILLS",
    "CombinationSettings",
    "DeviationScaling",
    "DifficultySettings",
    "ModifierSettings",
    "PerformanceSettings",
]


CATEGORIES = ("aim", "speed", "coordination", "flashlight")
REQUIRED_SKILLS = ("aim", "aim_no_sliders", "speed", "coordination", "flashlight")
COMBINATION_MODES = ("lp_norm", "sum")


def _as_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, ABCMapping):
        raise ConfigurationError(
            f"'{name}' must be a mapping", context={"section": name, "value": value}
        )
    return value


def _coerce_float(section: Mapping[str, Any], key: str, fallback: float, *, name: str) -> float:
    value = section.get(key, fallback)
    if isinstance(value, bool):
        raise ConfigurationError(
            f"'{name}.{key}' must be numeric", context={"key": f"{name}.{key}", "value": value}
        )
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"'{name}.{key}' must be numeric", context={"key": f"{name}.{key}", "value": value}
        ) from None


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return fallback


@dataclass(frozen=True, slots=True)
class DifficultySettings:
    """Skill strategy selection for the difficulty calculator."""

    skills: Mapping[str, Any]
    miss_penalty_skill: str = "aim"
    fit_miss_penalty: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "DifficultySettings":
        skills = _as_mapping(config.get("skills"), "skills")
        missing = [name for name in REQUIRED_SKILLS if name not in skills]
        if missing:
            raise ConfigurationError(
                "Calibration is missing skill definitions",
                context={"missing": ", ".join(missing)},
            )
        section = _as_mapping(config.get("difficulty"), "difficulty")
        penalty_skill = str(section.get("miss_penalty_skill", "aim"))
        if penalty_skill not in skills:
            raise ConfigurationError(
                f"Unknown miss penalty skill: {penalty_skill!r}",
                context={"miss_penalty_skill": penalty_skill},
            )
        return cls(
            skills=freeze_mapping(skills),
            miss_penalty_skill=penalty_skill,
            fit_miss_penalty=_coerce_bool(section.get("fit_miss_penalty"), True),
        )

    def build_strategies(self) -> dict[str, SkillStrategy]:
        """Instantiate every configured strategy keyed by skill name."""

        try:
            return build_strategies(self.skills)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid skill configuration: {exc}", context={"error": str(exc)}
            ) from exc


@dataclass(frozen=True, slots=True)
class CombinationSettings:
    """How category values are folded into the total."""

    mode: str = "lp_norm"
    exponent: float = 1.1
    multiplier: float = 1.12

    @classmethod
    def from_config(cls, section: Mapping[str, Any]) -> "CombinationSettings":
        mode = str(section.get("mode", "lp_norm"))
        if mode not in COMBINATION_MODES:
            raise ConfigurationError(
                f"Unknown combination mode: {mode!r}", context={"mode": mode}
            )
        options = _as_mapping(section.get(mode), f"combination.{mode}")
        if mode == "sum":
            return cls(
                mode=mode,
                exponent=1.0,
                multiplier=_coerce_float(options, "multiplier", 1.0, name="combination.sum"),
            )
        exponent = _coerce_float(options, "exponent", 1.1, name="combination.lp_norm")
        if exponent <= 0.0:
            raise ConfigurationError(
                "combination.lp_norm.exponent must be positive", context={"exponent": exponent}
            )
        return cls(
            mode=mode,
            exponent=exponent,
            multiplier=_coerce_float(options, "multiplier", 1.12, name="combination.lp_norm"),
        )


@dataclass(frozen=True, slots=True)
class DeviationScaling:
    """Window constants turning deviations into probability scalings."""

    aim_window: float = 50.0
    aim_scale: float = 4169.0 / 4050.0
    speed_window: float = 26.0
    speed_scale: float = 120.289 / 108.0
    accuracy_window: float = 7.5
    accuracy_scale: float = 100.0

    @classmethod
    def from_config(cls, section: Mapping[str, Any]) -> "DeviationScaling":
        defaults = cls()
        return cls(
            **{
                name: _coerce_float(section, name, getattr(defaults, name), name="deviation")
                for name in cls.__dataclass_fields__
            }
        )


@dataclass(frozen=True, slots=True)
class ModifierSettings:
    """Multipliers applied by modifier tags."""

    no_fail_per_miss: float = 0.02
    no_fail_floor: float = 0.9
    spun_out_exponent: float = 0.85
    relax_multiplier: float = 0.6
    hidden_approach_rate_bonus: float = 0.04
    hidden_approach_rate_reference: float = 12.0
    hidden_accuracy: float = 1.08
    hidden_flashlight: float = 1.3
    blinds_speed: float = 1.12
    blinds_accuracy: float = 1.14
    flashlight_accuracy: float = 1.02
    touch_device_exponent: float = 0.8

    @classmethod
    def from_config(cls, section: Mapping[str, Any]) -> "ModifierSettings":
        defaults = cls()

        def read(group: str, key: str, attribute: str) -> float:
            options = _as_mapping(section.get(group), f"modifiers.{group}")
            return _coerce_float(
                options, key, getattr(defaults, attribute), name=f"modifiers.{group}"
            )

        return cls(
            no_fail_per_miss=read("no_fail", "per_miss", "no_fail_per_miss"),
            no_fail_floor=read("no_fail", "floor", "no_fail_floor"),
            spun_out_exponent=read("spun_out", "exponent", "spun_out_exponent"),
            relax_multiplier=read("relax", "multiplier", "relax_multiplier"),
            hidden_approach_rate_bonus=read(
                "hidden", "approach_rate_bonus", "hidden_approach_rate_bonus"
            ),
            hidden_approach_rate_reference=read(
                "hidden", "approach_rate_reference", "hidden_approach_rate_reference"
            ),
            hidden_accuracy=read("hidden", "accuracy", "hidden_accuracy"),
            hidden_flashlight=read("hidden", "flashlight", "hidden_flashlight"),
            blinds_speed=read("blinds", "speed", "blinds_speed"),
            blinds_accuracy=read("blinds", "accuracy", "blinds_accuracy"),
            flashlight_accuracy=read("flashlight", "accuracy", "flashlight_accuracy"),
            touch_device_exponent=read(
                "touch_device", "rating_exponent", "touch_device_exponent"
            ),
        )


_DEFAULT_MISS_EXPONENTS = MappingProxyType(
    {"aim": 3.0, "speed": 3.0, "coordination": 3.0, "flashlight": 2.0}
)


@dataclass(frozen=True, slots=True)
class PerformanceSettings:
    """Constants used by the performance calculator."""

    rating_base: float = 0.0675
    rating_exponent: float = 3.0
    flashlight_multiplier: float = 25.0
    flashlight_exponent: float = 2.0
    combo_exponent: float = 0.8
    difficult_slider_fraction: float = 0.15
    include_coordination: bool = False
    miss_exponents: Mapping[str, float] = field(default_factory=lambda: _DEFAULT_MISS_EXPONENTS)
    deviation: DeviationScaling = field(default_factory=DeviationScaling)
    combination: CombinationSettings = field(default_factory=CombinationSettings)
    modifiers: ModifierSettings = field(default_factory=ModifierSettings)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PerformanceSettings":
        section = _as_mapping(config.get("performance"), "performance")
        defaults = cls()

        def number(key: str) -> float:
            return _coerce_float(section, key, getattr(defaults, key), name="performance")

        rating_base = number("rating_base")
        if rating_base <= 0.0:
            raise ConfigurationError(
                "performance.rating_base must be positive", context={"rating_base": rating_base}
            )

        exponents_section = _as_mapping(section.get("miss_exponents"), "miss_exponents")
        miss_exponents = {
            category: _coerce_float(
                exponents_section,
                category,
                _DEFAULT_MISS_EXPONENTS[category],
                name="miss_exponents",
            )
            for category in CATEGORIES
        }

        return cls(
            rating_base=rating_base,
            rating_exponent=number("rating_exponent"),
            flashlight_multiplier=number("flashlight_multiplier"),
            flashlight_exponent=number("flashlight_exponent"),
            combo_exponent=number("combo_exponent"),
            difficult_slider_fraction=number("difficult_slider_fraction"),
            include_coordination=_coerce_bool(section.get("include_coordination"), False),
            miss_exponents=MappingProxyType(miss_exponents),
            deviation=DeviationScaling.from_config(
                _as_mapping(section.get("deviation"), "deviation")
            ),
            combination=CombinationSettings.from_config(
                _as_mapping(section.get("combination"), "combination")
            ),
            modifiers=ModifierSettings.from_config(
                _as_mapping(section.get("modifiers"), "modifiers")
            ),
        )

    def miss_exponent(self, category: str) -> float:
        return float(self.miss_exponents.get(category, self.rating_exponent))
