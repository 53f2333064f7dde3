"""treeaudit - dependency graph of an installed node_modules tree.

Discovers every reachable installed package, hashes its own files,
records license provenance and prints a JSON graph of identities and
edges. Diagnostics go to stderr.
"""
import logging
import os
import sys

from args import parse_args
from cli_config import apply_cli_overrides, apply_config, load_config, resolve_output
from common.cancellation import CancelToken, ScanAbortedError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from tree.graph import build_edges
from tree.report import build_graph_document, log_summary, summarize, write_graph
from tree.resolver import resolve_tree

logger = logging.getLogger(__name__)


def run(args) -> int:
    """Run a scan for already parsed arguments.

    Args:
        args: Namespace produced by :func:`args.parse_args`.

    Returns:
        int: Exit code
    """
    config = load_config(getattr(args, "CONFIG", None))
    apply_config(config)
    apply_cli_overrides(args)
    output = resolve_output(args, config)

    root = os.path.abspath(Constants.DEFAULT_ROOT)
    if not os.path.isdir(root):
        logger.error("No node_modules found at %s. Exiting.", root)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "Scan starting",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="scan",
                target=root,
                workers=Constants.MAX_WORKERS,
                timeout=Constants.SCAN_TIMEOUT_SEC,
                edge_policy=Constants.EDGE_POLICY,
            ),
        )

    cancel = CancelToken(timeout=Constants.SCAN_TIMEOUT_SEC)
    try:
        index = resolve_tree(root, max_workers=Constants.MAX_WORKERS, cancel=cancel)
    except ScanAbortedError as e:
        logger.error("Scan of %s aborted: %s", root, e)
        return ExitCodes.SCAN_ABORTED.value

    edges = build_edges(index, Constants.EDGE_POLICY)
    summary = summarize(index)
    log_summary(summary)

    document = build_graph_document(root, index, edges, Constants.EDGE_POLICY)
    try:
        write_graph(document, output)
    except OSError as e:
        logger.error("Could not write graph to %s: %s", output, e)
        return ExitCodes.FILE_ERROR.value

    if summary.missing_license and getattr(args, "ERROR_ON_WARNINGS", False):
        logger.error("Warnings present, exiting with non-zero status code.")
        return ExitCodes.EXIT_WARNINGS.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    level = "ERROR" if args.QUIET else args.LOG_LEVEL
    configure_logging(level, getattr(args, "LOG_FILE", None))
    sys.exit(run(args))


if __name__ == "__main__":
    main()
