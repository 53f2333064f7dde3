"""Scan summary and graph document output."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from constants import EdgePolicy
from tree.graph import Edge
from tree.index import PackageIndex, PackageNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanSummary:
    package_count: int
    missing_license: List[PackageNode] = field(default_factory=list)


def summarize(index: PackageIndex) -> ScanSummary:
    """Count packages and collect those without any license information."""
    nodes = index.nodes()
    return ScanSummary(
        package_count=len(nodes),
        missing_license=[node for node in nodes.values() if node.missing_license],
    )


def log_summary(summary: ScanSummary) -> None:
    """Emit the summary as diagnostics, separate from the graph output."""
    logger.info("Scanned %d packages.", summary.package_count)
    if summary.missing_license:
        logger.warning("Packages missing license file or license field: %d", len(summary.missing_license))
        for node in summary.missing_license:
            logger.warning(" - %s at %s", node.id, node.path)
    else:
        logger.info("Packages missing license file or license field: 0")


def now_utc_iso() -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_graph_document(
    root: str,
    index: PackageIndex,
    edges: List[Edge],
    policy: EdgePolicy | str = EdgePolicy.FIRST_MATCH,
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """Assemble the structured graph document."""
    return {
        "generatedAt": generated_at or now_utc_iso(),
        "nodeModulesRoot": root,
        "edgePolicy": EdgePolicy(policy).value,
        "nodes": {package_id: node.to_dict() for package_id, node in index.nodes().items()},
        "edges": [edge.to_dict() for edge in edges],
    }


def write_graph(document: Dict[str, Any], output: Optional[str] = None) -> None:
    """Write the document as indented JSON to ``output`` or stdout.

    Raises:
        OSError: If the output file cannot be written.
    """
    body = json.dumps(document, indent=2)
    if output:
        with open(output, "w", encoding="utf-8") as file:
            file.write(body)
            file.write("\n")
        logger.info("Graph has been successfully exported at: %s", output)
    else:
        sys.stdout.write(body)
        sys.stdout.write("\n")
