"""License artifact discovery for installed packages."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from constants import Constants, LicenseSource
from tree.manifest import Manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LicenseInfo:
    """License provenance for one package."""

    license: Optional[str]
    source: LicenseSource
    text: Optional[str] = None

    @property
    def missing(self) -> bool:
        return self.source is LicenseSource.NONE


def find_license_file(package_dir: str) -> Optional[str]:
    """Locate a license file in ``package_dir``.

    The canonical filenames are tried in order; otherwise directory entries
    are matched case-insensitively against a small fallback set.

    Returns:
        Path of the first match, or None.
    """
    for name in Constants.LICENSE_FILENAMES:
        candidate = os.path.join(package_dir, name)
        if os.path.isfile(candidate):
            return candidate

    try:
        entries = sorted(os.listdir(package_dir))
    except OSError:
        return None
    for entry in entries:
        if entry.lower() in Constants.LICENSE_FALLBACK_NAMES:
            candidate = os.path.join(package_dir, entry)
            if os.path.isfile(candidate):
                return candidate
    return None


def read_license_text(path: str, limit: Optional[int] = None) -> Optional[str]:
    """Read at most ``limit`` bytes of a license file."""
    if limit is None:
        limit = Constants.LICENSE_TEXT_MAX_BYTES
    try:
        with open(path, "rb") as file:
            head = file.read(limit)
    except OSError as e:
        logger.warning("Could not read license file %s: %s", path, e)
        return None
    return head.decode("utf-8", errors="replace")


def detect_license(package_dir: str, manifest: Manifest) -> LicenseInfo:
    """Derive license provenance; a license file beats the manifest field."""
    license_file = find_license_file(package_dir)
    if license_file:
        return LicenseInfo(
            license=os.path.basename(license_file),
            source=LicenseSource.FILE,
            text=read_license_text(license_file),
        )
    if manifest.license:
        return LicenseInfo(license=manifest.license, source=LicenseSource.MANIFEST)
    return LicenseInfo(license=None, source=LicenseSource.NONE)
