"""NPM range matching against installed versions using semantic versioning."""

import logging
import re
from typing import List, Optional, Tuple

import semantic_version

from ..models import PackageRequest, ResolutionMode, ResolutionResult

logger = logging.getLogger(__name__)

# Comma between comparators, outside of any version text
_COMPARATOR_COMMA = re.compile(r"\s*,\s*")


class InvalidSpecError(ValueError):
    """The declared range cannot be interpreted as a semver range."""


class InstalledVersionResolver:
    """Pick an installed version that satisfies a declared npm range.

    Candidates are given in registration order and the first satisfying
    candidate wins, so results stay deterministic for a fixed scan order.
    """

    def resolve(self, req: PackageRequest, candidates: List[str]) -> ResolutionResult:
        """Match ``req`` against ``candidates`` and wrap the outcome."""
        invalid_spec = False
        try:
            resolved, count, error = self.pick(req, candidates)
        except InvalidSpecError as e:
            resolved, count, error = None, len(candidates), str(e)
            invalid_spec = True
        mode = req.requested_spec.mode if req.requested_spec else ResolutionMode.LATEST
        return ResolutionResult(
            identifier=req.identifier,
            requested_spec=req.raw_spec,
            resolved_version=resolved,
            resolution_mode=mode,
            candidate_count=count,
            error=error,
            invalid_spec=invalid_spec,
        )

    def pick(
        self, req: PackageRequest, candidates: List[str]
    ) -> Tuple[Optional[str], int, Optional[str]]:
        """Apply NPM semver rules to select version.

        Args:
            req: Package request
            candidates: Installed version strings, first registered first

        Returns:
            Tuple of (resolved_version, candidate_count, error_message)

        Raises:
            InvalidSpecError: If the declared spec is not a semver version or range.
        """
        if not req.requested_spec:
            return self._pick_first(candidates)

        spec = req.requested_spec
        if spec.mode == ResolutionMode.EXACT:
            return self._pick_exact(spec.raw, candidates)
        elif spec.mode == ResolutionMode.RANGE:
            return self._pick_range(spec.raw, candidates, spec.include_prerelease)
        else:
            return None, len(candidates), "Unsupported resolution mode"

    def _pick_first(self, candidates: List[str]) -> Tuple[Optional[str], int, Optional[str]]:
        """Any version is acceptable; keep registration order."""
        if not candidates:
            return None, 0, "No versions installed"
        return candidates[0], len(candidates), None

    def _pick_exact(self, version: str, candidates: List[str]) -> Tuple[Optional[str], int, Optional[str]]:
        """Check if exact version exists in candidates."""
        if version in candidates:
            return version, len(candidates), None
        try:
            wanted = semantic_version.Version(version.lstrip("=v"))
        except ValueError as e:
            # Dist-tags such as "next" land here
            raise InvalidSpecError(f"Invalid semver spec: {str(e)}") from e
        for candidate in candidates:
            try:
                if semantic_version.Version(candidate) == wanted:
                    return candidate, len(candidates), None
            except ValueError:
                continue
        return None, len(candidates), f"Version {version} not found"

    def _normalize_spec(self, spec_str: str) -> str:
        """Rewrite comma-joined comparators (">=1.0.0, <2.0.0") into npm's space-separated form."""
        return " || ".join(
            _COMPARATOR_COMMA.sub(" ", clause.strip()) for clause in spec_str.split("||")
        )

    def parse_spec(self, spec_str: str) -> semantic_version.NpmSpec:
        """Parse an npm range, retrying once with comma-joined comparators rewritten.

        Raises:
            InvalidSpecError: If the range is not valid npm range syntax.
        """
        try:
            return semantic_version.NpmSpec(spec_str)
        except ValueError as first_error:
            normalized = self._normalize_spec(spec_str)
            if normalized == spec_str:
                raise InvalidSpecError(f"Invalid semver spec: {str(first_error)}") from first_error
            try:
                return semantic_version.NpmSpec(normalized)
            except ValueError as e:
                raise InvalidSpecError(f"Invalid semver spec: {str(e)}") from e

    def _pick_range(
        self, spec_str: str, candidates: List[str], include_prerelease: bool
    ) -> Tuple[Optional[str], int, Optional[str]]:
        """Pick the first candidate inside the range."""
        spec = self.parse_spec(spec_str)

        for candidate in candidates:
            try:
                ver = semantic_version.Version(candidate)
            except ValueError:
                logger.debug("Ignoring non-semver installed version %s", candidate)
                continue
            # Skip pre-releases unless explicitly allowed
            if ver.prerelease and not include_prerelease:
                continue
            if spec.match(ver):
                return candidate, len(candidates), None

        return None, len(candidates), f"No versions match spec '{spec_str}'"
