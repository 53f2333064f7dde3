"""Argument parsing functionality for treeaudit."""

import argparse
from constants import Constants


def _positive_int(text):
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {text}")
    return value


def _positive_float(text):
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {text}")
    return value


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="treeaudit",
        description=(
            "treeaudit - Dependency graph of an installed node_modules tree "
            "with content hashes and license provenance"
        ),
        add_help=True,
    )

    parser.add_argument("-r", "--root",
                        dest="ROOT",
                        help="Path to the node_modules directory to audit (default: ./node_modules)",
                        action="store",
                        type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output JSON file (default: stdout)",
                        action="store",
                        type=str)
    parser.add_argument("--edge-policy",
                        dest="EDGE_POLICY",
                        help="How declared names are matched to installed packages: "
                             "first-match (first registered install) or strict (honor version ranges)",
                        action="store",
                        type=str.lower,
                        choices=Constants.EDGE_POLICIES)
    parser.add_argument("-w", "--workers",
                        dest="WORKERS",
                        help="Number of worker threads used for hashing and manifest reads",
                        action="store",
                        type=_positive_int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Abort the scan after this many seconds",
                        action="store",
                        type=_positive_float)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if any package is missing a license.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only log errors.",
                        action="store_true")

    return parser.parse_args(argv)
