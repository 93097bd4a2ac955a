"""Waveform domain - peak generation and the two-level peak cache.

This domain handles:
- PeakSet models and request handles
- Cache key derivation
- On-disk peak storage (atomic, line-oriented text files)
- The caching engine (memoization, coalescing, background generation)
"""

from .engine import WaveformCache
from .generator import PeakGenerator, bucket_width, compute_peaks, generate_peaks
from .keys import PATH_STRATEGY, STEM_STRATEGY, cache_key, path_key, stem_key
from .models import GenerationFailed, PeakRequest, PeakResult, PeakSet, PeakStatus
from .storage import (
    FileCacheStorage,
    NullCacheStorage,
    PeakStorage,
    format_peaks,
    parse_peaks,
)

__all__ = [
    # Engine
    "WaveformCache",
    # Generation
    "PeakGenerator",
    "bucket_width",
    "compute_peaks",
    "generate_peaks",
    # Keys
    "PATH_STRATEGY",
    "STEM_STRATEGY",
    "cache_key",
    "path_key",
    "stem_key",
    # Models
    "GenerationFailed",
    "PeakRequest",
    "PeakResult",
    "PeakSet",
    "PeakStatus",
    # Storage
    "FileCacheStorage",
    "NullCacheStorage",
    "PeakStorage",
    "format_peaks",
    "parse_peaks",
]
