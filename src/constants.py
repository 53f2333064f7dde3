"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    SCAN_ABORTED = 2
    EXIT_WARNINGS = 3


class LicenseSource(Enum):
    """Where a package's license information came from.

    Args:
        Enum (string): License provenance tag written to the graph.
    """

    FILE = "file"
    MANIFEST = "manifest"
    NONE = "none"


class EdgePolicy(Enum):
    """Tie-break policy used when turning declared names into edges.

    Args:
        Enum (string): Edge policy names accepted on the command line.
    """

    FIRST_MATCH = "first-match"
    STRICT = "strict"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    NODE_MODULES_DIR = "node_modules"
    DEFAULT_ROOT = "node_modules"
    PACKAGE_JSON_FILE = "package.json"
    SCOPE_PREFIX = "@"
    DEFAULT_VERSION = "0.0.0"

    # Checked in order before the case-insensitive fallback scan
    LICENSE_FILENAMES = [
        "LICENSE",
        "LICENSE.md",
        "LICENSE.txt",
        "LICENSE.MD",
        "license",
        "license.md",
        "COPYING",
        "COPYING.md",
        "UNLICENSE",
    ]
    LICENSE_FALLBACK_NAMES = {"license", "license.md", "license.txt", "copying", "unlicense"}
    LICENSE_TEXT_MAX_BYTES = 1000

    HASH_CHUNK_SIZE = 1024 * 1024
    MAX_WORKERS = min(32, (os.cpu_count() or 1) + 4)
    SCAN_TIMEOUT_SEC = None  # No deadline unless configured
    EDGE_POLICY = EdgePolicy.FIRST_MATCH.value
    EDGE_POLICIES = [EdgePolicy.FIRST_MATCH.value, EdgePolicy.STRICT.value]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "TREEAUDIT_LOG_LEVEL"
    DEFAULT_CONFIG_FILES = ["treeaudit.yml", "treeaudit.yaml", "treeaudit.json"]
