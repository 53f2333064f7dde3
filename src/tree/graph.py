"""Dependency edges between indexed packages.

The default policy links each declared name to the first identity ever
registered under that name, whatever range was declared. When several
versions of a package are installed, every consumer of that name points
at the same one. The strict policy instead picks the first registered
version that satisfies the declared range.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from constants import EdgePolicy
from tree.index import PackageIndex, PackageNode
from versioning.parser import parse_manifest_entry
from versioning.resolvers import InstalledVersionResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    """``from_id`` declares ``dep_name``, which resolved to ``to_id``."""

    from_id: str
    to_id: str
    dep_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.from_id, "to": self.to_id, "depName": self.dep_name}


def _first_registered(index: PackageIndex, node: PackageNode, dep_name: str) -> Optional[str]:
    ids = index.ids_for_name(dep_name)
    return ids[0] if ids else None


def _strict_target(
    index: PackageIndex,
    node: PackageNode,
    dep_name: str,
    resolver: InstalledVersionResolver,
) -> Optional[str]:
    ids = index.ids_for_name(dep_name)
    if not ids:
        return None
    req = parse_manifest_entry(dep_name, node.dependency_specs.get(dep_name))
    if not req.registry_spec:
        # Non-registry ranges cannot be matched against versions
        return ids[0]

    by_version: Dict[str, str] = {}
    for package_id in ids:
        target = index.get(package_id)
        if target is not None:
            by_version.setdefault(target.version, package_id)

    result = resolver.resolve(req, list(by_version))
    if result.invalid_spec:
        logger.debug("Unparsable range %r for %s in %s; using first registered", req.raw_spec, dep_name, node.id)
        return ids[0]
    if result.resolved_version is None:
        logger.debug("No installed %s satisfies %r declared by %s", dep_name, req.raw_spec, node.id)
        return None
    return by_version[result.resolved_version]


def build_edges(index: PackageIndex, policy: EdgePolicy | str = EdgePolicy.FIRST_MATCH) -> List[Edge]:
    """Derive the edge list from a fully resolved index.

    Args:
        index: Index at its resolution fixed point.
        policy: Edge tie-break policy.

    Returns:
        One edge per satisfied (package, declared name) pair.
    """
    policy = EdgePolicy(policy)
    resolver = InstalledVersionResolver()
    edges: List[Edge] = []
    for package_id, node in index.nodes().items():
        for dep_name in node.declared_dependencies:
            if policy is EdgePolicy.STRICT:
                target = _strict_target(index, node, dep_name, resolver)
            else:
                target = _first_registered(index, node, dep_name)
            if target is None:
                continue
            edges.append(Edge(from_id=package_id, to_id=target, dep_name=dep_name))
    return edges
