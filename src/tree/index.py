"""Identity index of discovered packages.

Each ``name@version`` identity is claimed by the first install that is
registered; later installs with the same identity never replace it. The
index also keeps, per package name, every identity in registration order,
which is what the graph builder's tie-break relies on.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from common.cancellation import CancelToken
from constants import LicenseSource
from tree.hashing import try_compute_dir_sha256
from tree.license import detect_license
from tree.manifest import Manifest, read_manifest

logger = logging.getLogger(__name__)


@dataclass
class PackageNode:
    """One canonical installed package."""

    id: str
    name: str
    version: str
    path: str
    sha256: Optional[str]
    license: Optional[str]
    license_source: LicenseSource
    license_text: Optional[str] = None
    declared_dependencies: Tuple[str, ...] = ()
    # Declared range per dependency name; only the strict edge policy reads it
    dependency_specs: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def missing_license(self) -> bool:
        return self.license_source is LicenseSource.NONE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the graph document."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "path": self.path,
            "sha256": self.sha256,
            "license": self.license,
            "licenseSource": self.license_source.value,
            "licenseText": self.license_text,
            "missingLicense": self.missing_license,
            "declaredDependencies": list(self.declared_dependencies),
        }


def build_node(package_dir: str, manifest: Manifest, cancel: Optional[CancelToken] = None) -> PackageNode:
    """Hash the package and detect its license.

    Hash failures degrade to ``sha256=None``; only cancellation propagates.
    """
    info = detect_license(package_dir, manifest)
    return PackageNode(
        id=manifest.identity,
        name=manifest.name,
        version=manifest.version,
        path=package_dir,
        sha256=try_compute_dir_sha256(package_dir, cancel),
        license=info.license,
        license_source=info.source,
        license_text=info.text,
        declared_dependencies=manifest.declared_dependencies,
        dependency_specs=dict(manifest.dependencies),
    )


class PackageIndex:
    """Insert-if-absent store of PackageNodes keyed by identity."""

    def __init__(self) -> None:
        self._nodes: Dict[str, PackageNode] = {}
        self._name_to_ids: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def __contains__(self, package_id: object) -> bool:
        with self._lock:
            return package_id in self._nodes

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def get(self, package_id: str) -> Optional[PackageNode]:
        with self._lock:
            return self._nodes.get(package_id)

    def nodes(self) -> Dict[str, PackageNode]:
        """Snapshot of all nodes in registration order."""
        with self._lock:
            return dict(self._nodes)

    def ids_for_name(self, name: str) -> List[str]:
        """Identities registered under ``name``, first registered first."""
        with self._lock:
            return list(self._name_to_ids.get(name, ()))

    def insert_if_absent(self, node: PackageNode) -> bool:
        """Register ``node`` unless its identity is already claimed.

        Returns:
            True if the node was inserted.
        """
        with self._lock:
            if node.id in self._nodes:
                return False
            self._nodes[node.id] = node
            self._name_to_ids.setdefault(node.name, []).append(node.id)
        logger.debug("Registered %s at %s", node.id, node.path)
        return True

    def register_or_get(self, package_dir: str, cancel: Optional[CancelToken] = None) -> Optional[str]:
        """Ensure the install at ``package_dir`` is indexed.

        Single-threaded entry point for callers that register installs one
        at a time. The resolver does not use it: its workers build nodes
        off-thread and the coordinator claims them with
        :meth:`insert_if_absent` in discovery order.

        Returns:
            The package identity, or None when the manifest has no usable
            name (the install is then ignored entirely).
        """
        manifest = read_manifest(package_dir)
        if manifest is None:
            return None
        package_id = manifest.identity
        if package_id in self:
            return package_id
        self.insert_if_absent(build_node(package_dir, manifest, cancel))
        return package_id
