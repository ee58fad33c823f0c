"""Convenience re-exports for test helpers."""

from __future__ import annotations

from .features import build_feature, build_stream, build_varied_stream
from .scores import add_misses, build_attributes, build_score, with_misses

__all__ = [
    "add_misses",
    "build_attributes",
    "build_feature",
    "build_score",
    "build_stream",
    "build_varied_stream",
    "with_misses",
]
