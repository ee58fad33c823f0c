"""Error types raised at the calculator boundary.

Degenerate but valid input never raises; these errors only signal callers
passing malformed data (negative counts, unordered features) or broken
calibration tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

__all__ = [
    "ConfigurationError",
    "ErrorPayload",
    "InvalidInputError",
    "PpcalcError",
    "build_error_payload",
    "log_error",
]


INPUT_CATEGORY = "input"
CONFIGURATION_CATEGORY = "configuration"
_DEFAULT_LOGGER_NAME = "ppcalc"


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Structured description of a rejected calculation request."""

    category: str
    message: str
    context: Mapping[str, Any]

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def _sanitise_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if not context:
        return {}
    payload: dict[str, Any] = {}
    for key, value in context.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            payload[str(key)] = value
        else:
            payload[str(key)] = repr(value)
    return payload


def build_error_payload(
    message: str,
    *,
    category: str,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    return ErrorPayload(
        category=category,
        message=message,
        context=_sanitise_context(context),
    )


def log_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Emit ``payload`` through ``logger.error`` with structured context."""

    target = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)
    target.error(
        payload.message,
        extra={
            "event": f"{payload.category}.error",
            "category": payload.category,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class PpcalcError(ValueError):
    """Base class carrying an :class:`ErrorPayload`."""

    category = "runtime"

    def __init__(
        self,
        message: str,
        *,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message, category=self.category, context=context
        )

    @property
    def context(self) -> Mapping[str, Any]:
        return self.payload.context


class InvalidInputError(PpcalcError):
    """Feature streams, map settings or score statistics are malformed."""

    category = INPUT_CATEGORY


class ConfigurationError(PpcalcError):
    """Calibration or project configuration cannot be interpreted."""

    category = CONFIGURATION_CATEGORY
