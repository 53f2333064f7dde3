"""Installed package tree audit: discovery, hashing, licenses and edges."""

from .graph import Edge, build_edges
from .index import PackageIndex, PackageNode
from .resolver import ResolutionContext, Resolver, resolve_tree

__all__ = [
    "Edge",
    "PackageIndex",
    "PackageNode",
    "ResolutionContext",
    "Resolver",
    "build_edges",
    "resolve_tree",
]
