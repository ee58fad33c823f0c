"""Bundled calibration resources."""
