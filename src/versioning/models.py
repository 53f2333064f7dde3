"""Data models for version range matching against installed packages."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ResolutionMode(Enum):
    """Resolution strategy derived from the declared range."""
    EXACT = "exact"
    RANGE = "range"
    LATEST = "latest"


@dataclass
class VersionSpec:
    """Normalized representation of a version spec and derived behavior flags."""
    raw: str
    mode: ResolutionMode
    include_prerelease: bool


@dataclass
class PackageRequest:
    """A declared dependency to be matched against installed versions."""
    identifier: str  # package name as declared
    requested_spec: Optional[VersionSpec]
    source: str  # "manifest"
    raw_spec: Optional[str]
    registry_spec: bool = True  # False for file:, git, npm: alias and similar


@dataclass
class ResolutionResult:
    """Matching outcome handed back to the graph builder."""
    identifier: str
    requested_spec: Optional[str]
    resolved_version: Optional[str]
    resolution_mode: ResolutionMode
    candidate_count: int
    error: Optional[str]
    invalid_spec: bool = False  # spec could not be parsed as semver at all
