"""
Sample metadata extraction.

Reads display metadata (title, duration, tags...) from audio files using
Mutagen. Used to fill local media records lazily, the first time a record
is shown in detail.
"""

import os
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError


def get_tag_value(audio_file: MutagenFile, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                # Handle different formats
                if isinstance(value, list) and value:
                    return str(value[0])
                return str(value)
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
    return None


def extract_metadata_from_filename(local_path: str) -> dict[str, Any]:
    """Extract basic info from filename as fallback."""
    path = Path(local_path)

    try:
        file_size = os.path.getsize(local_path)
    except OSError:
        file_size = 0

    return {
        "title": path.stem,
        "format": path.suffix.lower().lstrip("."),
        "file_size": file_size,
    }


def read_metadata(local_path: str) -> dict[str, Any]:
    """Read display metadata from an audio file.

    Never raises: unreadable or untagged files fall back to filename info.

    Returns:
        Mapping with at least title, format and file_size; duration,
        sample_rate, channels, artist and tags when the file provides them
    """
    metadata = extract_metadata_from_filename(local_path)

    try:
        audio_file = MutagenFile(local_path)
    except (MutagenError, Exception) as e:
        # Format parsers raise their own error types on malformed files
        logger.warning(f"Could not read metadata from {local_path}: {e}")
        return metadata

    if audio_file is None:
        # Format not recognized by mutagen
        return metadata

    info = getattr(audio_file, "info", None)
    if info is not None:
        length = getattr(info, "length", None)
        if length:
            metadata["duration"] = round(float(length), 3)
        sample_rate = getattr(info, "sample_rate", None)
        if sample_rate:
            metadata["sample_rate"] = int(sample_rate)
        channels = getattr(info, "channels", None)
        if channels:
            metadata["channels"] = int(channels)

    if audio_file.tags is not None:
        title = get_tag_value(audio_file, ["TIT2", "\xa9nam", "title", "TITLE"])
        if title:
            metadata["title"] = title
        artist = get_tag_value(audio_file, ["TPE1", "\xa9ART", "artist", "ARTIST"])
        if artist:
            metadata["artist"] = artist
        genre = get_tag_value(audio_file, ["TCON", "\xa9gen", "genre", "GENRE"])
        if genre:
            metadata["tags"] = [tag.strip() for tag in genre.split(";") if tag.strip()]

    return metadata


def format_duration(seconds: Optional[float]) -> str:
    """Format duration as M:SS.mmm for short samples."""
    if not seconds:
        return "?:??"
    minutes = int(seconds // 60)
    remainder = seconds - minutes * 60
    return f"{minutes}:{remainder:06.3f}"


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
