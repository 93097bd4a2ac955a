"""Library domain - sample file scanning and the media database.

This domain handles:
- Media record models
- Recursive scanning for audio files
- The in-memory media database (local scans and remote search results)
- Lazy metadata extraction
"""

# Models
from .models import MediaRecord, MediaSource

# Scanning
from .scanner import (
    ScanReport,
    is_supported_format,
    scan,
    scan_roots,
    scan_with_report,
)

# Database
from .database import MediaDatabase, local_records, records_from_search

# Metadata
from .metadata import read_metadata, format_duration, format_size

# Remote search boundary
from .provider import RemoteSearch, SearchResults

__all__ = [
    # Models
    "MediaRecord",
    "MediaSource",
    # Scanner
    "ScanReport",
    "is_supported_format",
    "scan",
    "scan_roots",
    "scan_with_report",
    # Database
    "MediaDatabase",
    "local_records",
    "records_from_search",
    # Metadata
    "read_metadata",
    "format_duration",
    "format_size",
    # Provider
    "RemoteSearch",
    "SearchResults",
]
