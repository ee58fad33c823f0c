"""Attribute cache configuration."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_ATTRIBUTES_CACHE_SIZE = 256

__all__ = ["CacheOptions", "DEFAULT_ATTRIBUTES_CACHE_SIZE"]


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, ABCMapping):
        return value
    return {}


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


def _coerce_size(value: Any, fallback: int) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return fallback
    return max(0, numeric)


@dataclass(frozen=True, slots=True)
class CacheOptions:
    """Immutable cache configuration parsed from project settings."""

    enabled: bool = True
    attributes_cache_size: int = DEFAULT_ATTRIBUTES_CACHE_SIZE

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "CacheOptions":
        """Read ``[performance]`` first, then ``[cache]``, then defaults.

        ``max_cache_size`` under ``[performance]`` wins over
        ``attributes_cache_size`` under ``[cache]``.  Unparseable values fall
        back to the defaults and negative sizes clamp to zero.
        """

        performance_cfg = _as_mapping(config.get("performance")) if config else {}
        cache_cfg = _as_mapping(config.get("cache")) if config else {}

        enabled = _coerce_bool(
            performance_cfg.get("cache_enabled"),
            _coerce_bool(cache_cfg.get("enabled"), True),
        )
        size = _coerce_size(
            cache_cfg.get("attributes_cache_size"), DEFAULT_ATTRIBUTES_CACHE_SIZE
        )
        size = _coerce_size(performance_cfg.get("max_cache_size"), size)
        return cls(enabled=enabled, attributes_cache_size=size)

    @property
    def effective_size(self) -> int:
        """Capacity to allocate; zero when caching is disabled."""

        return self.attributes_cache_size if self.enabled else 0
