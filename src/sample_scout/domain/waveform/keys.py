"""
Cache key derivation for waveform peaks.

Two strategies are supported:

- ``stem``: the file name without its extension. This matches caches written
  by earlier versions (``<stem>.wfc``) but two files with the same name in
  different folders share one entry.
- ``path``: the sanitized stem plus a short SHA-1 of the full normalized
  path, unique per file. This is the default.
"""

import hashlib
import re

from sample_scout.core.paths import basename, normalize

STEM_STRATEGY = "stem"
PATH_STRATEGY = "path"

# Characters allowed in the legacy stem key (letters, digits, '-', '_')
_LEGACY_STEM = re.compile(r"([\w-]+)\.\w+$")
_UNSAFE = re.compile(r"[^\w.-]+")


def stem_key(asset: str) -> str:
    """Pure function - legacy key: the file name without extension.

    Mirrors the legacy lookup, which keeps only the trailing run of word
    characters and dashes before the extension. Names that do not match
    fall back to the sanitized basename.
    """
    name = basename(normalize(asset))
    match = _LEGACY_STEM.search(name)
    if match:
        return match.group(1)
    stem = name.rsplit(".", 1)[0] if "." in name.lstrip(".") else name
    return _UNSAFE.sub("_", stem) or "_"


def path_key(asset: str) -> str:
    """Pure function - collision-free key from the full normalized path."""
    normalized = normalize(asset)
    digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()[:16]
    name = basename(normalized)
    stem = name.rsplit(".", 1)[0] if "." in name.lstrip(".") else name
    safe_stem = _UNSAFE.sub("_", stem).strip("._")[:64] or "asset"
    return f"{safe_stem}-{digest}"


def cache_key(asset: str, strategy: str = PATH_STRATEGY) -> str:
    """Compute the cache key for an asset.

    Raises:
        ValueError: If the strategy is unknown
    """
    if strategy == PATH_STRATEGY:
        return path_key(asset)
    if strategy == STEM_STRATEGY:
        return stem_key(asset)
    raise ValueError(f"Unknown cache key strategy: {strategy!r}")
