"""Logging configuration for applications embedding the calculators.

Library modules only create loggers; :func:`setup_logging` is meant to be
called once by the host application.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping as ABCMapping
from datetime import datetime, timezone
from typing import Any, Mapping

__all__ = ["JsonFormatter", "setup_logging"]


_ROOT_LOGGER_NAMES = ("ppcalc", "ppcore")
_HANDLER_MARKER = "_ppcalc_handler"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=True)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    if isinstance(level, int):
        return level
    raise ValueError(f"Unknown logging level: {value!r}")


def _build_handler(output: str) -> logging.Handler:
    if output == "stderr":
        return logging.StreamHandler(sys.stderr)
    if output == "stdout":
        return logging.StreamHandler(sys.stdout)
    return logging.FileHandler(output, encoding="utf-8")


def setup_logging(config: Mapping[str, Any] | None = None) -> list[logging.Logger]:
    """Attach a handler to the package loggers from ``config["logging"]``.

    Recognised keys are ``level`` (default ``info``), ``output`` (``stderr``,
    ``stdout`` or a file path) and ``format`` (``json`` or ``text``).
    Calling it again replaces the handler installed previously.
    """

    section = config.get("logging") if config else None
    options: Mapping[str, Any] = section if isinstance(section, ABCMapping) else {}
    level = _resolve_level(options.get("level", "info"))
    output = str(options.get("output", "stderr"))
    fmt = str(options.get("format", "json")).lower()
    if fmt not in {"json", "text"}:
        raise ValueError(f"Unknown logging format: {fmt!r}")

    handler = _build_handler(output)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    setattr(handler, _HANDLER_MARKER, True)

    loggers: list[logging.Logger] = []
    for name in _ROOT_LOGGER_NAMES:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if getattr(existing, _HANDLER_MARKER, False):
                logger.removeHandler(existing)
                existing.close()
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
        loggers.append(logger)
    return loggers
