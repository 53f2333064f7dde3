"""Breadth-first discovery of installed packages.

Dependencies are looked up the way Node resolves modules from a package:
first ``<package>/node_modules/<name>``, then ``<root>/<name>``. The
traversal runs in waves. Inspection (manifest read, hashing, license
detection, dependency path lookup) happens on a bounded worker pool;
results are applied to the index by the calling thread in discovery
order, so identity claims and the per-name registration order are the
same as in a sequential scan.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set, Tuple

from common.cancellation import CancelToken, ScanAbortedError
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from tree.index import PackageIndex, PackageNode, build_node
from tree.manifest import read_manifest

logger = logging.getLogger(__name__)


def list_top_level_packages(root: str) -> List[str]:
    """List package directories directly under ``root``.

    Scope directories (``@scope``) are expanded one level to reach the
    package roots. Symlinked entries are not followed.
    """
    if not os.path.isdir(root):
        return []
    packages: List[str] = []
    with os.scandir(root) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if not entry.is_dir(follow_symlinks=False):
                continue
            if entry.name.startswith(Constants.SCOPE_PREFIX):
                try:
                    with os.scandir(entry.path) as scoped:
                        packages.extend(
                            child.path
                            for child in sorted(scoped, key=lambda e: e.name)
                            if child.is_dir(follow_symlinks=False)
                        )
                except OSError as e:
                    logger.warning("Could not list scope directory %s: %s", entry.path, e)
            else:
                packages.append(entry.path)
    return packages


def resolve_installed_path(parent_path: str, dep_name: str, root: str) -> Optional[str]:
    """Find where ``dep_name`` is installed as seen from ``parent_path``.

    Returns:
        The nested install if present, else the root install, else None.
    """
    nested = os.path.join(parent_path, Constants.NODE_MODULES_DIR, dep_name)
    if os.path.exists(nested):
        return nested
    hoisted = os.path.join(root, dep_name)
    if os.path.exists(hoisted):
        return hoisted
    return None


@dataclass(frozen=True)
class QueueEntry:
    path: str
    seed: bool = False


@dataclass(frozen=True)
class InspectedPackage:
    """Worker output for one install path."""

    path: str
    node: Optional[PackageNode]  # None when the identity was already claimed
    resolved: Tuple[Tuple[str, str], ...]  # (declared name, installed path)


@dataclass
class ResolutionContext:
    """State of one resolution run: the index, the queue and what was queued."""

    root: str
    index: PackageIndex = field(default_factory=PackageIndex)
    cancel: CancelToken = field(default_factory=CancelToken)
    queue: Deque[QueueEntry] = field(default_factory=deque)
    queued_paths: Set[str] = field(default_factory=set)

    def enqueue(self, path: str, seed: bool = False) -> bool:
        """Queue ``path`` unless it was already queued in this run."""
        if path in self.queued_paths:
            return False
        self.queued_paths.add(path)
        self.queue.append(QueueEntry(path, seed))
        return True

    def seed(self) -> int:
        """Queue every top-level install; returns how many were queued."""
        return sum(1 for path in list_top_level_packages(self.root) if self.enqueue(path, seed=True))

    def take_wave(self) -> List[QueueEntry]:
        wave = list(self.queue)
        self.queue.clear()
        return wave


class Resolver:
    """Expands a ResolutionContext until no new packages are found."""

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.max_workers = max(1, max_workers or Constants.MAX_WORKERS)

    def inspect(self, context: ResolutionContext, path: str) -> Optional[InspectedPackage]:
        """Read one install and locate its declared dependencies.

        Hashing and license detection only run when the identity is not
        indexed yet.
        """
        context.cancel.raise_if_cancelled()
        manifest = read_manifest(path)
        if manifest is None:
            return None
        node = None
        if manifest.identity not in context.index:
            node = build_node(path, manifest, context.cancel)
        resolved = []
        for dep_name in manifest.declared_dependencies:
            installed = resolve_installed_path(path, dep_name, context.root)
            if installed is None:
                logger.debug("Unresolved dependency %s of %s", dep_name, manifest.identity)
                continue
            resolved.append((dep_name, installed))
        return InspectedPackage(path=path, node=node, resolved=tuple(resolved))

    def run(self, context: ResolutionContext) -> PackageIndex:
        """Seed the context if needed and resolve to a fixed point.

        Raises:
            ScanAbortedError: If the context's token is cancelled or its
                deadline passes.
        """
        if not context.queue and not context.queued_paths:
            context.seed()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            wave_number = 0
            while context.queue:
                context.cancel.raise_if_cancelled()
                wave_number += 1
                wave = context.take_wave()
                with Timer() as timer:
                    results = self._inspect_wave(executor, context, wave)
                    added = self._apply_wave(context, wave, results)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Resolution wave complete",
                        extra=extra_context(
                            event="wave",
                            component="resolver",
                            wave=wave_number,
                            size=len(wave),
                            registered=added,
                            duration_ms=timer.duration_ms(),
                        ),
                    )
        return context.index

    def _inspect_wave(
        self,
        executor: ThreadPoolExecutor,
        context: ResolutionContext,
        wave: List[QueueEntry],
    ) -> List[Optional[InspectedPackage]]:
        futures: List[Future] = [executor.submit(self.inspect, context, entry.path) for entry in wave]
        _, pending = wait(futures, timeout=context.cancel.remaining())
        if pending:
            context.cancel.cancel("scan deadline exceeded")
            for future in pending:
                future.cancel()
            raise ScanAbortedError(context.cancel.reason)

        results: List[Optional[InspectedPackage]] = []
        for entry, future in zip(wave, futures):
            try:
                results.append(future.result())
            except ScanAbortedError:
                raise
            except (OSError, ValueError) as e:
                logger.warning("Skipping %s: %s", entry.path, e)
                results.append(None)
        return results

    def _apply_wave(
        self,
        context: ResolutionContext,
        wave: List[QueueEntry],
        results: List[Optional[InspectedPackage]],
    ) -> int:
        added = 0
        for entry, result in zip(wave, results):
            if result is None:
                continue
            claimed = result.node is not None and context.index.insert_if_absent(result.node)
            if claimed:
                added += 1
            elif not entry.seed:
                # Another install already owns this identity
                continue
            for _, installed in result.resolved:
                context.enqueue(installed)
        return added


def resolve_tree(
    root: str,
    *,
    index: Optional[PackageIndex] = None,
    max_workers: Optional[int] = None,
    cancel: Optional[CancelToken] = None,
) -> PackageIndex:
    """Discover every package reachable from the top level of ``root``."""
    context = ResolutionContext(
        root=root,
        index=index if index is not None else PackageIndex(),
        cancel=cancel if cancel is not None else CancelToken(),
    )
    return Resolver(max_workers).run(context)
