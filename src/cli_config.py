"""Configuration file loading and runtime tunables.

Precedence: CLI flags, then the config file, then the defaults in
``constants.Constants``. Problems with the config file are logged and
ignored so that a bad config never prevents a scan.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


def _default_config_path() -> Optional[str]:
    for name in Constants.DEFAULT_CONFIG_FILES:
        if os.path.isfile(name):
            return name
    return None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a YAML or JSON file.

    Args:
        config_path: Explicit path; when None the default file names are
            looked up in the working directory.

    Returns:
        Configuration dict (empty when there is none or it is unusable).
    """
    path = config_path or _default_config_path()
    if not path:
        return {}

    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Failed to load config %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Ignoring config %s: top level must be a mapping", path)
        return {}
    logger.debug("Loaded config from %s", path)
    return data


def _set_positive(name: str, value: Any, cast) -> None:
    try:
        converted = cast(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid config value for %s: %r", name, value)
        return
    if converted <= 0:
        logger.warning("Ignoring invalid config value for %s: %r", name, value)
        return
    setattr(Constants, name, converted)


def apply_config(config: Dict[str, Any]) -> None:
    """Apply the ``scan`` section of a loaded config to Constants."""
    scan = config.get("scan") if isinstance(config, dict) else None
    if not isinstance(scan, dict):
        return

    if scan.get("root"):
        Constants.DEFAULT_ROOT = str(scan["root"])
    if scan.get("workers") is not None:
        _set_positive("MAX_WORKERS", scan["workers"], int)
    if scan.get("timeout") is not None:
        _set_positive("SCAN_TIMEOUT_SEC", scan["timeout"], float)
    if scan.get("license_text_max_bytes") is not None:
        _set_positive("LICENSE_TEXT_MAX_BYTES", scan["license_text_max_bytes"], int)
    policy = scan.get("edge_policy")
    if policy is not None:
        if str(policy).lower() in Constants.EDGE_POLICIES:
            Constants.EDGE_POLICY = str(policy).lower()
        else:
            logger.warning("Ignoring unknown edge_policy in config: %r", policy)


def apply_cli_overrides(args) -> None:
    """Apply CLI flags to Constants; CLI has the highest precedence."""
    if getattr(args, "ROOT", None):
        Constants.DEFAULT_ROOT = args.ROOT
    if getattr(args, "WORKERS", None) is not None:
        Constants.MAX_WORKERS = int(args.WORKERS)
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.SCAN_TIMEOUT_SEC = float(args.TIMEOUT)
    if getattr(args, "EDGE_POLICY", None):
        Constants.EDGE_POLICY = args.EDGE_POLICY


def resolve_output(args, config: Dict[str, Any]) -> Optional[str]:
    """Output path from the CLI, else from the config file, else None."""
    if getattr(args, "OUTPUT", None):
        return args.OUTPUT
    output = config.get("output") if isinstance(config, dict) else None
    return str(output) if output else None
