"""
Path normalization utilities for Sample Scout.

Provides pure functions that canonicalize filesystem paths so that every
component (scanner, media database, waveform cache) agrees on one spelling
per file.
"""

import os
import re
from typing import Optional

_SEPARATOR_RUN = re.compile(r"[/\\]+")


def normalize(path: Optional[str], sep: str = os.sep) -> str:
    """Pure function - canonicalize separators in a path string.

    Any run of forward or back slashes collapses to ``sep`` and a single
    trailing separator is stripped. A bare root (``"/"``) is kept as is so
    the result still names the root.

    Args:
        path: Path to normalize (None and "" are accepted)
        sep: Separator to use (defaults to the host separator)

    Returns:
        Normalized path, or "" when the input is missing
    """
    if not path:
        return ""

    normalized = _SEPARATOR_RUN.sub(lambda _match: sep, os.fspath(path))
    if len(normalized) > 1 and normalized.endswith(sep):
        normalized = normalized[:-1]
    return normalized


def absolute(path: Optional[str], sep: str = os.sep) -> str:
    """Normalize a path after resolving it against the working directory.

    Relative and absolute spellings of one file give the same string.
    Missing input still gives "".
    """
    if not path:
        return ""
    return normalize(os.path.abspath(os.fspath(path)), sep=sep)


def join(base: str, name: str, sep: str = os.sep) -> str:
    """Pure function - join a directory and an entry name, then normalize."""
    return normalize(f"{base}{sep}{name}", sep=sep)


def basename(path: str) -> str:
    """Return the last component of a normalized or raw path."""
    parts = _SEPARATOR_RUN.split(path) if path else [""]
    return parts[-1]


def extension(path: str) -> str:
    """Return the lowercase extension of a path without the leading dot.

    Dotfiles such as ``.wav`` (no stem) have no extension.
    """
    name = basename(path)
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return ""
    return ext.lower()
