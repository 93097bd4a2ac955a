"""
Sample library domain models.

Contains data structures for representing indexed audio assets.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple


class MediaSource(str, Enum):
    """Where a media record came from."""

    LOCAL = "local"  # Produced by the asset scanner
    REMOTE = "remote"  # Produced by a remote search response


EMPTY_METADATA: Mapping[str, Any] = MappingProxyType({})


class MediaRecord(NamedTuple):
    """One entry in the media database.

    Local records are keyed by their normalized file path and start with
    empty metadata that is filled lazily. Remote records are keyed by the
    remote service's id and carry the search response fields as metadata.
    """
    identity: str  # Normalized file path, or remote id
    metadata: Mapping[str, Any] = EMPTY_METADATA  # title, duration, tags, ...
    source: MediaSource = MediaSource.LOCAL

    @property
    def is_local(self) -> bool:
        return self.source is MediaSource.LOCAL

    @property
    def title(self) -> str:
        """Display title: metadata title, else the file or remote name."""
        title = self.metadata.get("title") or self.metadata.get("name")
        if title:
            return str(title)
        return self.identity.replace("\\", "/").rsplit("/", 1)[-1]

    @property
    def has_metadata(self) -> bool:
        return bool(self.metadata)


def freeze_metadata(metadata: Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Pure function - read-only copy of a metadata mapping."""
    if not metadata:
        return EMPTY_METADATA
    return MappingProxyType(dict(metadata))
