"""Browsing session - explicit state for one host session.

The session owns the media database and the waveform cache and is passed to
whatever drives the UI. Nothing lives in module globals: a session is
created at start-up and closed at the end.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from loguru import logger

from sample_scout.core.config import Config
from sample_scout.domain.library import (
    MediaDatabase,
    MediaRecord,
    RemoteSearch,
    ScanReport,
    SearchResults,
    local_records,
    read_metadata,
    records_from_search,
    scan_roots,
)
from sample_scout.domain.waveform import (
    GenerationFailed,
    PeakGenerator,
    PeakRequest,
    PeakResult,
    WaveformCache,
    generate_peaks,
)


@dataclass
class Session:
    """Session state passed explicitly to everything that needs it.

    Attributes:
        config: Application configuration
        database: Current media database snapshot
        waveforms: Waveform peak cache engine
        metadata_loader: Reads display metadata for local records
    """

    config: Config
    waveforms: WaveformCache
    database: MediaDatabase = field(default_factory=MediaDatabase)
    metadata_loader: Callable[[str], dict] = read_metadata

    @classmethod
    def create(
        cls, config: Optional[Config] = None, generator: PeakGenerator = generate_peaks
    ) -> "Session":
        """Create a session with an empty database and a configured cache."""
        config = config or Config()
        config.cache.validate()
        waveforms = WaveformCache.from_config(config.cache, generator=generator)
        logger.debug(
            f"Session started: cache={config.cache.root}, "
            f"resolution={config.cache.resolution}, keys={config.cache.key_strategy}"
        )
        return cls(config=config, waveforms=waveforms)

    # Media database

    def scan_library(
        self,
        roots: Optional[Iterable[str]] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ) -> ScanReport:
        """Scan library roots and replace the database with local records.

        Args:
            roots: Directories to scan (default: configured library roots)
            progress_callback: Optional callback(path) per matched file

        Returns:
            ScanReport of the scan
        """
        roots = list(roots) if roots is not None else self.config.library.roots
        report = scan_roots(roots, self.config.library.extensions, progress_callback)
        self.database.replace_all(local_records(report.paths))
        return report

    def apply_search_results(self, results: SearchResults) -> list[MediaRecord]:
        """Replace the database with remote search results."""
        records = records_from_search(results)
        self.database.replace_all(records)
        logger.info(f"Remote search returned {len(records)} results")
        return records

    def search_remote(self, provider: RemoteSearch, query: str) -> list[MediaRecord]:
        """Run a remote search and load its results into the database."""
        return self.apply_search_results(provider.search(query))

    def records(self) -> tuple[MediaRecord, ...]:
        """Current records in display order."""
        return self.database.list()

    def describe(self, identity: str) -> MediaRecord:
        """Get a record with its metadata filled in.

        Raises:
            RecordNotFound: If no record has this identity
        """
        return self.database.with_metadata(identity, self.metadata_loader)

    # Waveforms

    def request_peaks(
        self, identity: str, on_ready: Optional[Callable[[PeakRequest], None]] = None
    ) -> PeakRequest:
        """Request peaks for a record without blocking the frame loop.

        Raises:
            RecordNotFound: If no record has this identity
        """
        record = self.database.get(identity)
        if not record.is_local:
            return PeakRequest.completed(
                identity, "", GenerationFailed(identity, "", "remote record has no local audio")
            )
        return self.waveforms.request(record.identity, on_ready=on_ready)

    def get_peaks(self, identity: str, timeout: Optional[float] = None) -> PeakResult:
        """Get peaks for a record, blocking until available."""
        record = self.database.find(identity)
        if record is not None and not record.is_local:
            return GenerationFailed(identity, "", "remote record has no local audio")
        return self.waveforms.get_peaks(identity, timeout=timeout)

    def tick(self) -> list[PeakRequest]:
        """Advance background work by one frame."""
        return self.waveforms.tick()

    # Lifecycle

    def close(self) -> None:
        """Tear the session down (stops peak generation workers)."""
        self.waveforms.close()
        self.database.replace_all(())
        logger.debug("Session closed")

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
