"""
Sample library scanning.

Walks library roots with an explicit worklist (no recursion depth limit),
keeps files whose extension is on the allow-list and skips any subtree that
cannot be read without failing the rest of the scan.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from loguru import logger

from sample_scout.core.config import DEFAULT_EXTENSIONS, normalize_extensions
from sample_scout.core.paths import absolute, extension, join, normalize


@dataclass
class ScanReport:
    """Result of a scan: matched paths plus traversal statistics."""

    paths: list[str] = field(default_factory=list)
    directories_scanned: int = 0
    files_seen: int = 0
    skipped_directories: list[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when at least one subtree could not be read."""
        return bool(self.skipped_directories)


def is_supported_format(path: str, extensions: Iterable[str]) -> bool:
    """Check if a file's extension is on the allow-list."""
    return extension(path) in normalize_extensions(list(extensions))


def _list_directory(directory: str) -> tuple[list[str], list[str]]:
    """Enumerate files and subdirectories of one directory separately.

    Raises:
        OSError: If the directory cannot be opened
    """
    files: list[str] = []
    subdirs: list[str] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry.name)
                elif entry.is_file():
                    files.append(entry.name)
            except OSError as e:
                # Entry vanished between listing and stat
                logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
    return files, subdirs


def scan_with_report(
    root: str,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> ScanReport:
    """Scan a directory tree for audio files.

    Args:
        root: Directory to scan
        extensions: Allowed extensions (with or without dot, any case)
        progress_callback: Optional callback(path) for each matched file

    Returns:
        ScanReport with every qualifying file exactly once
    """
    allowed = normalize_extensions(list(extensions))
    report = ScanReport()
    worklist = [absolute(root)]

    while worklist:
        directory = worklist.pop()
        try:
            files, subdirs = _list_directory(directory)
        except OSError as e:
            # Subtree vanished or is unreadable - skip it, keep scanning
            logger.warning(f"Skipping unreadable directory {directory}: {e}")
            report.skipped_directories.append(directory)
            continue

        report.directories_scanned += 1
        report.files_seen += len(files)

        for name in files:
            if extension(name) in allowed:
                path = join(directory, name)
                report.paths.append(path)
                if progress_callback:
                    progress_callback(path)

        for name in subdirs:
            worklist.append(join(directory, name))

    logger.debug(
        f"Scanned {root}: {len(report.paths)} assets in "
        f"{report.directories_scanned} directories "
        f"({len(report.skipped_directories)} skipped)"
    )
    return report


def scan(root: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[str]:
    """Scan a directory tree and return normalized paths of audio files.

    Order is unspecified; each qualifying file appears exactly once.
    """
    return scan_with_report(root, extensions).paths


def scan_roots(
    roots: Iterable[str],
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    progress_callback: Optional[Callable[[str], None]] = None,
) -> ScanReport:
    """Scan all configured library roots into one report.

    Missing roots are logged and skipped. Overlapping roots do not produce
    duplicate paths.
    """
    combined = ScanReport()
    seen: set[str] = set()

    for root in roots:
        root_path = normalize(os.path.expanduser(root))
        if not os.path.isdir(root_path):
            logger.warning(f"Library root does not exist: {root_path}")
            combined.skipped_directories.append(root_path)
            continue

        report = scan_with_report(root_path, extensions, progress_callback)
        combined.directories_scanned += report.directories_scanned
        combined.files_seen += report.files_seen
        combined.skipped_directories.extend(report.skipped_directories)
        for path in report.paths:
            if path not in seen:
                seen.add(path)
                combined.paths.append(path)

    logger.info(f"Library scan complete: {len(combined.paths)} assets found")
    return combined
