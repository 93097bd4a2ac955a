"""
In-memory media database.

Holds the current snapshot of media records in insertion order. A snapshot
is replaced wholesale after every scan or remote search; callers never see a
half-replaced database.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

from loguru import logger

from sample_scout.errors import RecordNotFound

from .models import MediaRecord, MediaSource, freeze_metadata

MetadataLoader = Callable[[str], Mapping[str, Any]]


class MediaDatabase:
    """Ordered, atomically replaceable collection of media records.

    Only the session's control thread mutates the database. Each snapshot is
    an immutable tuple plus an index built alongside it, and both are swapped
    in a single assignment.
    """

    def __init__(self, records: Iterable[MediaRecord] = ()):
        self._snapshot: tuple[tuple[MediaRecord, ...], dict[str, int]] = ((), {})
        self.replace_all(records)

    def replace_all(self, records: Iterable[MediaRecord]) -> None:
        """Swap in a new snapshot, discarding every previous record.

        When an identity occurs more than once the first occurrence wins,
        keeping list order stable.
        """
        ordered: list[MediaRecord] = []
        index: dict[str, int] = {}
        for record in records:
            if record.identity in index:
                logger.debug(f"Dropping duplicate media record {record.identity}")
                continue
            index[record.identity] = len(ordered)
            ordered.append(record)

        self._snapshot = (tuple(ordered), index)

    def list(self) -> tuple[MediaRecord, ...]:
        """All records in insertion order (read-only view)."""
        return self._snapshot[0]

    def get(self, identity: str) -> MediaRecord:
        """Get a record by identity.

        Raises:
            RecordNotFound: If no record has this identity
        """
        record = self.find(identity)
        if record is None:
            raise RecordNotFound(identity)
        return record

    def find(self, identity: str) -> Optional[MediaRecord]:
        """Get a record by identity, or None."""
        records, index = self._snapshot
        position = index.get(identity)
        if position is None:
            return None
        return records[position]

    def with_metadata(self, identity: str, loader: MetadataLoader) -> MediaRecord:
        """Fill a local record's metadata on first access.

        Records that already carry metadata (including every remote record)
        are returned unchanged. Otherwise the loader runs once and a new
        snapshot holding the filled record replaces the current one.

        Raises:
            RecordNotFound: If no record has this identity
        """
        record = self.get(identity)
        if record.has_metadata or not record.is_local:
            return record

        filled = record._replace(metadata=freeze_metadata(loader(identity)))

        records, index = self._snapshot
        if index.get(identity) is None or records[index[identity]] is not record:
            # Snapshot replaced while loading - keep the newer snapshot intact
            return filled

        updated = list(records)
        updated[index[identity]] = filled
        self._snapshot = (tuple(updated), index)
        return filled

    def search(self, query: str) -> list[MediaRecord]:
        """Search records by file name, title or tags (case-insensitive)."""
        query = query.lower()
        results = []

        for record in self.list():
            tags = record.metadata.get("tags") or []
            if isinstance(tags, str):
                tags = [tags]
            search_fields = [record.title, record.identity.replace("\\", "/").rsplit("/", 1)[-1]]
            search_fields.extend(str(tag) for tag in tags)

            if any(query in field.lower() for field in search_fields):
                results.append(record)

        return results

    def __len__(self) -> int:
        return len(self._snapshot[0])

    def __iter__(self) -> Iterator[MediaRecord]:
        return iter(self._snapshot[0])

    def __contains__(self, identity: object) -> bool:
        return identity in self._snapshot[1]


def local_records(paths: Iterable[str]) -> list[MediaRecord]:
    """Pure function - build local records (metadata filled lazily)."""
    return [MediaRecord(identity=path, source=MediaSource.LOCAL) for path in paths]


def records_from_search(results: Iterable[tuple[str, Mapping[str, Any]]]) -> list[MediaRecord]:
    """Pure function - build remote records from (remote_id, metadata) pairs."""
    return [
        MediaRecord(
            identity=str(remote_id),
            metadata=freeze_metadata(metadata),
            source=MediaSource.REMOTE,
        )
        for remote_id, metadata in results
    ]
