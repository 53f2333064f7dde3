"""package.json schema for installed packages.

Only the fields the audit needs are modelled. Defaulting rules:

- ``version`` falls back to ``0.0.0`` when absent or not a string.
- ``dependencies`` is the union of ``dependencies`` and
  ``optionalDependencies``; a name present in both keeps the optional
  range. ``peerDependencies`` and ``devDependencies`` are ignored.
- ``license`` accepts the modern string form as well as the legacy
  ``{"type": ...}`` object and ``licenses`` list forms.

An unreadable or malformed manifest is treated the same as a missing one.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from constants import Constants

logger = logging.getLogger(__name__)


def package_identity(name: str, version: Optional[str]) -> str:
    """Return the canonical ``name@version`` identity."""
    return f"{name}@{version or Constants.DEFAULT_VERSION}"


def normalize_license(value: Any) -> Optional[str]:
    """Reduce the various package.json license shapes to a string."""
    if not value:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        return normalize_license(value.get("type"))
    if isinstance(value, list):
        for item in value:
            found = normalize_license(item)
            if found:
                return found
    return None


def _dependency_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {
        str(name): spec if isinstance(spec, str) else ""
        for name, spec in value.items()
    }


@dataclass(frozen=True)
class Manifest:
    """Normalized view of a package.json."""

    name: str
    version: str = Constants.DEFAULT_VERSION
    dependencies: Dict[str, str] = field(default_factory=dict)
    license: Optional[str] = None

    @property
    def identity(self) -> str:
        return package_identity(self.name, self.version)

    @property
    def declared_dependencies(self) -> Tuple[str, ...]:
        return tuple(self.dependencies)


def parse_manifest(data: Any) -> Optional[Manifest]:
    """Build a Manifest from decoded JSON.

    Args:
        data: Decoded package.json content.

    Returns:
        Manifest, or None when there is no usable ``name``.
    """
    if not isinstance(data, dict):
        return None
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        return None

    version = data.get("version")
    if not isinstance(version, str) or not version:
        version = Constants.DEFAULT_VERSION

    dependencies = _dependency_map(data.get("dependencies"))
    dependencies.update(_dependency_map(data.get("optionalDependencies")))

    license_value = normalize_license(data.get("license")) or normalize_license(data.get("licenses"))

    return Manifest(
        name=name,
        version=version,
        dependencies=dependencies,
        license=license_value,
    )


def read_manifest(package_dir: str) -> Optional[Manifest]:
    """Read and parse ``package_dir/package.json``.

    Returns:
        Manifest, or None when the file is missing, unreadable, malformed
        or lacks a name.
    """
    manifest_path = os.path.join(package_dir, Constants.PACKAGE_JSON_FILE)
    try:
        with open(manifest_path, "r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, ValueError) as e:
        logger.debug("No usable manifest at %s: %s", manifest_path, e)
        return None
    return parse_manifest(data)
