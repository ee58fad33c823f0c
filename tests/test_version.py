"""Tests for the package version metadata."""

import importlib
from importlib import metadata

import pytest
from packaging.version import Version

import ppcalc
from ppcalc import _version as version_module


def test_version_is_semver_patch():
    version = Version(ppcalc.__version__)

    assert len(version.release) == 3, (
        "ppcalc.__version__ must contain exactly three release components"
    )


def test_version_falls_back_to_changelog(monkeypatch):
    def missing(name):
        raise metadata.PackageNotFoundError(name)

    monkeypatch.setattr(metadata, "version", missing)
    reloaded = importlib.reload(version_module)

    assert reloaded.__version__ == "0.1.0"

    monkeypatch.undo()
    importlib.reload(version_module)


@pytest.mark.parametrize("raw_version", ["1.2", "not-a-version"])
def test_version_rejects_non_semver_metadata(monkeypatch, raw_version):
    monkeypatch.setattr(metadata, "version", lambda name: raw_version)
    with pytest.raises(RuntimeError):
        importlib.reload(version_module)

    monkeypatch.undo()
    importlib.reload(version_module)
