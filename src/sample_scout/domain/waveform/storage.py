"""
Persistent storage for waveform peaks.

Each cache key maps to one text file ``<key>.wfc`` under the cache root:
one line per peak frame, values separated by spaces. Files are written to a
temporary name and renamed into place, so readers see either the previous
entry or the complete new one.
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from sample_scout.errors import CacheUnavailable

from .models import PeakSet

CACHE_SUFFIX = ".wfc"


class PeakStorage(Protocol):
    """Protocol for peak cache backends."""

    def load(self, key: str) -> Optional[PeakSet]:
        """Load peaks for a key, None on miss."""
        ...

    def store(self, key: str, peaks: PeakSet) -> None:
        """Persist peaks for a key, replacing any previous entry."""
        ...

    def invalidate(self, key: str) -> None:
        """Remove the entry for a key if present."""
        ...


def format_peaks(peaks: PeakSet) -> str:
    """Pure function - serialize peaks to the line-oriented cache format.

    Values are written with repr() so they parse back to the identical float.
    """
    lines = [" ".join(repr(value) for value in frame) for frame in peaks.frames]
    return "".join(f"{line}\n" for line in lines)


def parse_peaks(text: str) -> PeakSet:
    """Pure function - parse the line-oriented cache format.

    Blank lines (including a trailing one) are ignored.

    Raises:
        ValueError: If a value is not numeric or frames have differing arity
    """
    frames = []
    for line in text.splitlines():
        values = line.split()
        if not values:
            continue
        frames.append([float(value) for value in values])
    return PeakSet.from_frames(frames)


class FileCacheStorage:
    """Filesystem-backed peak storage.

    The root directory is created lazily on first use. If it cannot be
    created, every call raises CacheUnavailable so the caller can fall back
    to running without a cache.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser()
        self._ready = False

    def ensure_root(self) -> None:
        """Create the cache root if needed.

        Raises:
            CacheUnavailable: If the directory cannot be created
        """
        if self._ready:
            return
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnavailable(str(self.root), str(e)) from e
        if not os.access(self.root, os.W_OK):
            raise CacheUnavailable(str(self.root), "directory is not writable")
        self._ready = True

    def path_for(self, key: str) -> Path:
        """Cache file path for a key."""
        return self.root / f"{key}{CACHE_SUFFIX}"

    def load(self, key: str) -> Optional[PeakSet]:
        """Load peaks for a key.

        Returns:
            PeakSet, or None when the entry is missing or unreadable

        Raises:
            CacheUnavailable: If the cache root cannot be created
        """
        self.ensure_root()
        cache_path = self.path_for(key)

        try:
            text = cache_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read waveform cache {cache_path}: {e}")
            return None

        try:
            return parse_peaks(text)
        except ValueError as e:
            # Corrupt entry → miss, regenerated and overwritten by the caller
            logger.warning(f"Ignoring corrupt waveform cache {cache_path}: {e}")
            return None

    def store(self, key: str, peaks: PeakSet) -> None:
        """Atomically write peaks for a key (temp file + rename).

        Raises:
            CacheUnavailable: If the cache root cannot be created or written
        """
        self.ensure_root()
        cache_path = self.path_for(key)
        payload = format_peaks(peaks)

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.root, prefix=f".{key}.", suffix=".tmp"
            )
        except OSError as e:
            raise CacheUnavailable(str(self.root), str(e)) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, cache_path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise CacheUnavailable(
                str(self.root), f"could not write {cache_path.name}: {e}"
            ) from e

        logger.debug(f"Cached {peaks.frame_count} peak frames at {cache_path}")

    def invalidate(self, key: str) -> None:
        """Remove the cache file for a key if it exists."""
        self.ensure_root()
        self.path_for(key).unlink(missing_ok=True)


class NullCacheStorage:
    """Always-miss storage used when no cache directory is available."""

    def load(self, key: str) -> Optional[PeakSet]:
        return None

    def store(self, key: str, peaks: PeakSet) -> None:
        pass

    def invalidate(self, key: str) -> None:
        pass
