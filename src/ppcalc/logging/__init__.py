"""Logging utilities for ppcalc."""

from ppcalc.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
