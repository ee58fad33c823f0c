"""Load calibration tables and merge user overrides into them."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

__all__ = ["deep_merge", "freeze_mapping", "load_calibration", "merge_overrides"]


_CALIBRATION_RESOURCE_PACKAGE = "ppcalc.resources.config"
_CALIBRATION_RESOURCE_NAME = "calibration.yaml"


def load_calibration(
    path: str | Path | None = None,
    *,
    search_paths: Iterable[str | Path] | None = None,
) -> Mapping[str, Any]:
    """Load a calibration table.

    Parameters
    ----------
    path:
        YAML file to read directly. A missing file raises
        :class:`FileNotFoundError`.
    search_paths:
        Directories or files inspected in order; directories are resolved
        against ``calibration.yaml``. The first existing file wins and the
        bundled defaults are used when none exists.
    """

    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        return _read_calibration(candidate)

    for entry in search_paths or ():
        entry_path = Path(entry).expanduser()
        if entry_path.is_dir():
            entry_path = entry_path / _CALIBRATION_RESOURCE_NAME
        if entry_path.is_file():
            return _read_calibration(entry_path)

    resource = resources.files(_CALIBRATION_RESOURCE_PACKAGE).joinpath(
        _CALIBRATION_RESOURCE_NAME
    )
    return _parse_calibration(resource.read_text(encoding="utf-8"), source=str(resource))


def merge_overrides(
    base: Mapping[str, Any], *overrides: Mapping[str, Any] | None
) -> Mapping[str, Any]:
    """Return ``base`` with every mapping in ``overrides`` merged on top."""

    merged = _copy_tree(base)
    for payload in overrides:
        if isinstance(payload, MappingABC):
            deep_merge(merged, payload)
    return freeze_mapping(merged)


def deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Recursively merge ``source`` into ``target`` in place."""

    for key, value in source.items():
        name = str(key)
        current = target.get(name)
        if isinstance(value, MappingABC):
            nested = _copy_tree(current) if isinstance(current, MappingABC) else {}
            deep_merge(nested, value)
            target[name] = nested
        else:
            target[name] = value


def freeze_mapping(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only view of ``payload`` with nested mappings frozen too."""

    return MappingProxyType(
        {
            str(key): freeze_mapping(value) if isinstance(value, MappingABC) else value
            for key, value in payload.items()
        }
    )


def _copy_tree(source: Mapping[str, Any]) -> dict[str, Any]:
    return {
        str(key): _copy_tree(value) if isinstance(value, MappingABC) else value
        for key, value in source.items()
    }


def _read_calibration(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as buffer:
        return _parse_calibration(buffer.read(), source=str(path))


def _parse_calibration(payload: str, *, source: str) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in calibration file: {source}") from exc

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise TypeError(f"Calibration in {source!s} must decode to a mapping")
    return freeze_mapping(data)
