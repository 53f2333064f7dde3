"""Deterministic content hashing for installed packages.

The digest covers a package's own files only; nested ``node_modules``
directories belong to other packages and are skipped. Relative paths are
ordered with a locale-aware collation key that does not depend on the
host locale or filesystem enumeration order.
"""

from __future__ import annotations

import hashlib
import logging
import os
import unicodedata
from typing import List, Optional, Tuple

from common.cancellation import CancelToken
from constants import Constants

logger = logging.getLogger(__name__)

# CLDR root order for ASCII punctuation and symbols, all of which sort
# after whitespace and before digits.
_PUNCTUATION_ORDER = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"

# Letters that collate as two letters at the primary level
_EXPANSIONS = {"Æ": "AE", "æ": "ae", "Œ": "OE", "œ": "oe", "ß": "ss"}


def _primary_weight(ch: str) -> Tuple[int, object]:
    if ch.isspace():
        return (0, 0)
    position = _PUNCTUATION_ORDER.find(ch)
    if position >= 0:
        return (1, position)
    if ch.isdigit():
        return (2, unicodedata.digit(ch, 0))
    base = unicodedata.normalize("NFKD", ch)[:1].casefold()
    if base.isalpha():
        return (3, base)
    return (4, ord(ch))


def collation_key(text: str) -> tuple:
    """Sort key approximating ``localeCompare(..., "en")``.

    Letters compare case- and accent-insensitively first; accents, then
    case (lowercase first), then the raw string break ties.
    """
    expanded = "".join(_EXPANSIONS.get(ch, ch) for ch in text)
    primary = tuple(_primary_weight(ch) for ch in expanded)
    secondary = tuple(len(unicodedata.normalize("NFKD", ch)) > 1 for ch in text)
    tertiary = tuple(ch.isupper() for ch in text)
    return (primary, secondary, tertiary, text)


def _walk_files(current: str, found: List[str], cancel: Optional[CancelToken]) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()
    with os.scandir(current) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if entry.name == Constants.NODE_MODULES_DIR:
                    continue
                _walk_files(entry.path, found, cancel)
            elif entry.is_file(follow_symlinks=False):
                found.append(entry.path)


def _sorted_package_files(package_dir: str, cancel: Optional[CancelToken]) -> List[Tuple[str, str]]:
    """(``/``-separated relative path, real path) pairs in collation order."""
    files: List[str] = []
    _walk_files(package_dir, files, cancel)
    pairs = [
        (os.path.relpath(path, package_dir).replace(os.sep, "/").replace("\\", "/"), path)
        for path in files
    ]
    return sorted(pairs, key=lambda pair: collation_key(pair[0]))


def list_package_files(package_dir: str, cancel: Optional[CancelToken] = None) -> List[str]:
    """Return the package's own files as sorted, ``/``-separated relative paths."""
    return [rel for rel, _ in _sorted_package_files(package_dir, cancel)]


def compute_dir_sha256(package_dir: str, cancel: Optional[CancelToken] = None) -> str:
    """Hash a package directory.

    For each file in collation order the digest is fed the relative path,
    a NUL byte, the file content and another NUL byte. Names that are not
    valid UTF-8 contribute their raw bytes.

    Args:
        package_dir: Package root directory.
        cancel: Optional token checked between files.

    Returns:
        Hex-encoded SHA-256 digest.

    Raises:
        OSError: If the tree or a file cannot be read.
        UnicodeEncodeError: If a file name cannot be encoded at all.
        ScanAbortedError: If ``cancel`` fires mid-scan.
    """
    digest = hashlib.sha256()
    for rel, real_path in _sorted_package_files(package_dir, cancel):
        if cancel is not None:
            cancel.raise_if_cancelled()
        digest.update(rel.encode("utf-8", "surrogateescape"))
        digest.update(b"\0")
        with open(real_path, "rb") as file:
            while True:
                chunk = file.read(Constants.HASH_CHUNK_SIZE)
                if not chunk:
                    break
                digest.update(chunk)
        digest.update(b"\0")
    return digest.hexdigest()


def try_compute_dir_sha256(package_dir: str, cancel: Optional[CancelToken] = None) -> Optional[str]:
    """Like :func:`compute_dir_sha256` but returns None on I/O or name encoding failure."""
    try:
        return compute_dir_sha256(package_dir, cancel)
    except (OSError, UnicodeError) as e:
        logger.warning("Error hashing %s: %s", package_dir, e)
        return None
