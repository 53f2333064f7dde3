"""Shared fixtures for building installed package trees on disk."""

import json
from pathlib import Path

import pytest

from constants import Constants


def write_package(directory: Path, name=None, version=None, *, dependencies=None,
                  optional=None, license=None, files=None, manifest=None) -> Path:
    """Create a package directory with a package.json and extra files."""
    directory.mkdir(parents=True, exist_ok=True)
    if manifest is None:
        manifest = {}
        if name is not None:
            manifest["name"] = name
        if version is not None:
            manifest["version"] = version
        if dependencies is not None:
            manifest["dependencies"] = dependencies
        if optional is not None:
            manifest["optionalDependencies"] = optional
        if license is not None:
            manifest["license"] = license
    if manifest is not False:
        (directory / "package.json").write_text(json.dumps(manifest, indent=2))
    for rel, content in (files or {}).items():
        target = directory / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content)
    return directory


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch):
    """Undo Constants overrides made by config and CLI code under test."""
    for name in ("DEFAULT_ROOT", "MAX_WORKERS", "SCAN_TIMEOUT_SEC", "EDGE_POLICY", "LICENSE_TEXT_MAX_BYTES"):
        monkeypatch.setattr(Constants, name, getattr(Constants, name))


@pytest.fixture
def make_package():
    """Return the package writer helper."""
    return write_package


@pytest.fixture
def node_modules(tmp_path):
    """An empty node_modules root."""
    root = tmp_path / "node_modules"
    root.mkdir()
    return root
