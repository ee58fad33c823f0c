"""Performance values from difficulty attributes and score statistics."""

from ppcalc.performance.calculator import PerformanceCalculator, effective_miss_count
from ppcalc.performance.modifiers import (
    Modifier,
    ModifierContext,
    ModifierEffect,
    modifier_effect,
    parse_modifiers,
)

__all__ = [
    "Modifier",
    "ModifierContext",
    "ModifierEffect",
    "PerformanceCalculator",
    "effective_miss_count",
    "modifier_effect",
    "parse_modifiers",
]
