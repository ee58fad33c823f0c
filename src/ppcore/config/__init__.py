"""Calibration loading helpers."""

from ppcore.config.loader import deep_merge, freeze_mapping, load_calibration, merge_overrides

__all__ = ["deep_merge", "freeze_mapping", "load_calibration", "merge_overrides"]
