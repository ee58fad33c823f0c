"""Helpers to load project-level configuration and resolve calibration."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as ABCMapping
from pathlib import Path
from typing import Any, Mapping

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from ppcore.config.loader import load_calibration, merge_overrides

from ppcalc.errors import ConfigurationError

__all__ = ["load_project_config", "resolve_calibration", "resolve_project_calibration"]


_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "ppcalc"


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, ABCMapping):
            result[str(key)] = _as_dict(value)
        else:
            result[str(key)] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def load_project_config(path: str | Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.ppcalc]`` table from ``pyproject.toml``.

    ``path`` may point at the file or at the directory holding it.  Returns
    ``None`` when the file or the table does not exist.
    """

    pyproject_path = _resolve_pyproject_path(Path(path))
    if pyproject_path is None:
        return None
    pyproject_path = pyproject_path.resolve(strict=False)
    if not pyproject_path.is_file():
        return None

    with pyproject_path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(
                f"Invalid TOML in {pyproject_path}", context={"path": str(pyproject_path)}
            ) from exc

    tool_section = payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None
    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None
    return _as_dict(section), pyproject_path


def resolve_calibration(
    overrides: Mapping[str, Any] | None = None,
    *,
    path: str | Path | None = None,
    search_paths: Iterable[str | Path] | None = None,
) -> Mapping[str, Any]:
    """Return the calibration table with ``overrides`` deep-merged on top."""

    try:
        base = load_calibration(path, search_paths=search_paths)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Calibration file not found: {exc.args[0]}", context={"path": str(exc.args[0])}
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(str(exc), context={"path": path}) from exc
    if overrides is not None and not isinstance(overrides, ABCMapping):
        raise ConfigurationError(
            "Calibration overrides must be a mapping",
            context={"type": type(overrides).__name__},
        )
    return merge_overrides(base, overrides)


def resolve_project_calibration(path: str | Path) -> Mapping[str, Any]:
    """Calibration honouring ``[tool.ppcalc]`` in the project at ``path``.

    The table may name a ``calibration_path`` (relative to the project file)
    and a ``calibration`` sub-table of overrides.
    """

    loaded = load_project_config(path)
    if loaded is None:
        return resolve_calibration()
    config, source = loaded
    calibration_path = config.get("calibration_path")
    if calibration_path is not None:
        calibration_path = source.parent / Path(str(calibration_path)).expanduser()
    return resolve_calibration(config.get("calibration"), path=calibration_path)
