"""Difficulty and performance calculators built on :mod:`ppcore`.

Typical use::

    from ppcalc import DifficultyCalculator, MapSettings, PerformanceCalculator

    attributes = DifficultyCalculator().calculate(features, map_settings)
    breakdown = PerformanceCalculator().calculate(attributes, score)
"""

from ._version import __version__
from .attributes import DifficultyAttributes, MapSettings, PerformanceBreakdown, ScoreStatistics
from .configuration import load_project_config, resolve_calibration, resolve_project_calibration
from .core.cache import AttributesCache
from .core.cache_settings import CacheOptions
from .difficulty import DifficultyCalculator
from .errors import ConfigurationError, ErrorPayload, InvalidInputError, PpcalcError
from .performance import PerformanceCalculator
from .settings import DifficultySettings, PerformanceSettings

__all__ = [
    "__version__",
    "AttributesCache",
    "CacheOptions",
    "ConfigurationError",
    "DifficultyAttributes",
    "DifficultyCalculator",
    "DifficultySettings",
    "ErrorPayload",
    "InvalidInputError",
    "MapSettings",
    "PerformanceBreakdown",
    "PerformanceCalculator",
    "PerformanceSettings",
    "PpcalcError",
    "ScoreStatistics",
    "load_project_config",
    "resolve_calibration",
    "resolve_project_calibration",
]
