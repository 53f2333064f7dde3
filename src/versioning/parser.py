"""Parsing of declared dependency ranges from package.json."""

from typing import Optional

from .models import PackageRequest, ResolutionMode, VersionSpec

# Range prefixes that point somewhere other than the registry
_NON_REGISTRY_PREFIXES = (
    "file:",
    "link:",
    "git:",
    "git+",
    "github:",
    "gitlab:",
    "bitbucket:",
    "http:",
    "https:",
    "npm:",
    "workspace:",
    "portal:",
    "patch:",
)


def _determine_resolution_mode(spec: str) -> ResolutionMode:
    """Determine resolution mode from spec string."""
    range_ops = ['^', '~', '*', 'x', 'X', '-', '<', '>', '=', '|', ' ']
    if any(op in spec for op in range_ops):
        return ResolutionMode.RANGE
    return ResolutionMode.EXACT


def _determine_include_prerelease(spec: str) -> bool:
    """Allow prerelease candidates only when the range itself names one."""
    return any(pre in spec.lower() for pre in ['pre', 'rc', 'alpha', 'beta'])


def is_registry_spec(spec: str) -> bool:
    """Return False for ranges that are paths, URLs, aliases or repo shorthands."""
    lowered = spec.strip().lower()
    if lowered.startswith(_NON_REGISTRY_PREFIXES):
        return False
    # "user/repo" GitHub shorthand
    return "/" not in lowered


def parse_manifest_entry(identifier: str, raw_spec: Optional[str], source: str = "manifest") -> PackageRequest:
    """Construct a PackageRequest from a dependencies entry.

    Preserves raw spec for logging while normalizing spec mode. An empty
    range or ``latest`` means any installed version is acceptable.
    """
    if raw_spec is None or raw_spec.strip() == '' or raw_spec.strip().lower() == 'latest':
        return PackageRequest(
            identifier=identifier,
            requested_spec=None,
            source=source,
            raw_spec=raw_spec,
        )

    spec = raw_spec.strip()
    if not is_registry_spec(spec):
        return PackageRequest(
            identifier=identifier,
            requested_spec=None,
            source=source,
            raw_spec=raw_spec,
            registry_spec=False,
        )

    requested_spec = VersionSpec(
        raw=spec,
        mode=_determine_resolution_mode(spec),
        include_prerelease=_determine_include_prerelease(spec),
    )
    return PackageRequest(
        identifier=identifier,
        requested_spec=requested_spec,
        source=source,
        raw_spec=raw_spec,
    )
