"""
Waveform cache engine.

Returns peaks for an asset from memory, from the on-disk cache, or by
running the peak generator, in that order. Generation happens on a small
worker pool so the host's frame loop never blocks on decoding:

    request = cache.request(path)   # returns immediately
    ...
    cache.tick()                    # once per frame, delivers finished work
    if request.status is PeakStatus.READY:
        draw(request.peaks)

Requests for an asset that is already generating attach to the in-flight
work instead of starting a second generation. Coalescing is per absolute
asset path, not per cache key: under the legacy ``stem`` key strategy two
files with the same stem in different folders share one cache file, may
generate at the same time, and the entry holds whichever finished last.
If the cache directory is unusable the engine keeps working without
persistence.
"""

import contextlib
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from functools import partial
from typing import Callable, Optional

from loguru import logger

from sample_scout.core.config import CacheConfig
from sample_scout.core.paths import absolute
from sample_scout.errors import CacheUnavailable, DecodeError

from .generator import PeakGenerator, generate_peaks
from .keys import PATH_STRATEGY, STEM_STRATEGY, cache_key
from .models import GenerationFailed, PeakRequest, PeakResult, PeakSet
from .storage import FileCacheStorage, NullCacheStorage, PeakStorage

ReadyCallback = Callable[[PeakRequest], None]


class WaveformCache:
    """Memoizing, coalescing front end over peak storage and generation.

    The memo map, in-flight map, pending callbacks and delivery queue are
    guarded by one lock. Workers never touch the memo map: finished results
    are queued and folded in by tick() (or by get_peaks() for blocking
    callers).
    """

    def __init__(
        self,
        storage: PeakStorage,
        generator: PeakGenerator = generate_peaks,
        resolution: int = 100,
        max_workers: int = 2,
        key_strategy: str = PATH_STRATEGY,
    ):
        if key_strategy not in (PATH_STRATEGY, STEM_STRATEGY):
            raise ValueError(f"Unknown cache key strategy: {key_strategy!r}")
        if resolution <= 0:
            raise ValueError(f"Resolution must be positive, got {resolution}")

        self.resolution = resolution
        self.key_strategy = key_strategy
        self._storage = storage
        self._generator = generator
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="waveform"
        )

        self._lock = threading.Lock()
        self._peaks: dict[str, PeakSet] = {}
        self._inflight: dict[str, Future] = {}
        self._callbacks: dict[str, list[ReadyCallback]] = {}
        self._completed: deque[tuple[str, Future]] = deque()

        self._storage_lock = threading.Lock()
        self._degraded = isinstance(storage, NullCacheStorage)
        self._closed = False

    @classmethod
    def from_config(
        cls, config: CacheConfig, generator: PeakGenerator = generate_peaks
    ) -> "WaveformCache":
        """Create an engine backed by the configured cache directory."""
        return cls(
            storage=FileCacheStorage(config.root),
            generator=generator,
            resolution=config.resolution,
            max_workers=config.max_workers,
            key_strategy=config.key_strategy,
        )

    # Properties

    @property
    def degraded(self) -> bool:
        """True once the cache directory proved unusable (always-miss mode)."""
        return self._degraded

    @property
    def pending(self) -> int:
        """Number of assets with generation in flight."""
        with self._lock:
            return len(self._inflight)

    def key_for(self, asset: str) -> str:
        """Cache key for an asset under this engine's key strategy."""
        return cache_key(absolute(asset), self.key_strategy)

    def peek(self, asset: str) -> Optional[PeakSet]:
        """Peaks already in memory, without any I/O."""
        with self._lock:
            return self._peaks.get(absolute(asset))

    # Requests

    def request(self, asset: str, on_ready: Optional[ReadyCallback] = None) -> PeakRequest:
        """Request peaks without blocking.

        Args:
            asset: Audio file path (relative paths resolve against the cwd)
            on_ready: Optional callback(request), run from tick() when the
                result is delivered (immediately for memory hits)

        Returns:
            PeakRequest - ready for memory hits, pending otherwise
        """
        return self._request(asset, on_ready, force=False)

    def regenerate(self, asset: str, on_ready: Optional[ReadyCallback] = None) -> PeakRequest:
        """Discard memory and disk state for an asset and generate again.

        The new result overwrites the cache entry. If generation is already
        in flight the request attaches to it.
        """
        return self._request(asset, on_ready, force=True)

    def get_peaks(self, asset: str, timeout: Optional[float] = None) -> PeakResult:
        """Get peaks for an asset, blocking until they are available.

        Never raises: failures come back as GenerationFailed and nothing is
        cached for them. Blocking callers need no tick() to free the result.
        """
        request = self.request(asset)
        try:
            result = request.wait(timeout)
        except FutureTimeout:
            return GenerationFailed(request.asset, request.key, "timed out waiting for peaks")

        self._settle(request.asset, request.future, take_callbacks=False)
        self._discard_delivery(request.asset, request.future)
        return result

    def forget(self, asset: str) -> None:
        """Drop the in-memory entry for an asset (disk cache is kept)."""
        with self._lock:
            self._peaks.pop(absolute(asset), None)

    def tick(self) -> list[PeakRequest]:
        """Deliver finished generation results.

        Call once per frame from the control thread. Populates the memo
        map, runs pending on_ready callbacks and returns the delivered
        requests.
        """
        delivered = []
        while True:
            with self._lock:
                if not self._completed:
                    break
                asset, future = self._completed.popleft()

            callbacks = self._settle(asset, future, take_callbacks=True)
            if future.cancelled():
                continue

            request = PeakRequest(asset, self.key_for(asset), future)
            for callback in callbacks:
                try:
                    callback(request)
                except Exception:
                    logger.exception(f"Peak callback failed for {asset}")
            delivered.append(request)

        return delivered

    def close(self) -> None:
        """Stop the worker pool; queued generations are cancelled.

        Handles still held by the host report cancelled work as failed, and
        later requests complete at once with GenerationFailed.
        """
        with self._lock:
            self._closed = True
            self._inflight.clear()
            self._callbacks.clear()
        self._executor.shutdown(wait=True, cancel_futures=True)
        with self._lock:
            self._completed.clear()

    def __enter__(self) -> "WaveformCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Internals

    def _request(
        self, asset: str, on_ready: Optional[ReadyCallback], force: bool
    ) -> PeakRequest:
        asset = absolute(asset)
        key = self.key_for(asset)
        submitted = None

        with self._lock:
            peaks = None if force else self._peaks.get(asset)
            if peaks is None:
                if force:
                    self._peaks.pop(asset, None)

                if self._closed:
                    return PeakRequest.completed(
                        asset, key, GenerationFailed(asset, key, "waveform cache is closed")
                    )

                future = self._inflight.get(asset)
                if future is not None:
                    logger.debug(f"Generation already in flight for {asset}, attaching")
                else:
                    future = self._executor.submit(self._resolve, asset, key, force)
                    self._inflight[asset] = future
                    submitted = future

                if on_ready is not None:
                    self._callbacks.setdefault(asset, []).append(on_ready)

        if peaks is None:
            if submitted is not None:
                # Outside the lock: runs inline when the future already finished
                submitted.add_done_callback(partial(self._on_done, asset))
            return PeakRequest(asset, key, future)

        request = PeakRequest.completed(asset, key, peaks)
        if on_ready is not None:
            on_ready(request)
        return request

    def _on_done(self, asset: str, future: Future) -> None:
        """Queue a finished future for tick() unless nobody needs it."""
        with self._lock:
            if self._inflight.get(asset) is not future and not self._callbacks.get(asset):
                # Settled by a blocking caller (or dropped by close())
                return
            self._completed.append((asset, future))

    def _discard_delivery(self, asset: str, future: Future) -> None:
        """Drop a queued future a blocking caller already settled."""
        with self._lock:
            if self._callbacks.get(asset):
                return
            with contextlib.suppress(ValueError):
                self._completed.remove((asset, future))

    def _settle(self, asset: str, future: Future, take_callbacks: bool) -> list[ReadyCallback]:
        """Fold a finished future into the memo map (idempotent).

        Only the call that removes the future from the in-flight map writes
        the memo entry, so a later settle cannot undo forget() or overwrite
        a regenerated result.
        """
        with self._lock:
            current = self._inflight.get(asset)
            if current is future:
                del self._inflight[asset]
                current = None
                if not future.cancelled():
                    result = future.result()
                    if isinstance(result, PeakSet):
                        self._peaks[asset] = result

            if take_callbacks and current is None:
                return self._callbacks.pop(asset, [])
            return []

    def _resolve(self, asset: str, key: str, force: bool) -> PeakResult:
        """Worker: load from storage, else generate and persist."""
        if force:
            self._invalidate(key)
        else:
            cached = self._load(key)
            if cached is not None:
                logger.debug(f"Waveform cache hit for {asset}")
                return cached

        try:
            peaks = self._generator(asset, self.resolution)
            if not isinstance(peaks, PeakSet):
                peaks = PeakSet.from_frames(peaks)
        except DecodeError as e:
            logger.warning(f"Peak generation failed for {asset}: {e.reason}")
            return GenerationFailed(asset, key, e.reason)
        except Exception as e:
            logger.exception(f"Peak generator raised for {asset}")
            return GenerationFailed(asset, key, f"{type(e).__name__}: {e}")

        self._store(key, peaks)
        return peaks

    def _load(self, key: str) -> Optional[PeakSet]:
        try:
            return self._storage.load(key)
        except CacheUnavailable as e:
            self._degrade(e)
            return None

    def _store(self, key: str, peaks: PeakSet) -> None:
        try:
            self._storage.store(key, peaks)
        except CacheUnavailable as e:
            self._degrade(e)

    def _invalidate(self, key: str) -> None:
        try:
            self._storage.invalidate(key)
        except CacheUnavailable as e:
            self._degrade(e)

    def _degrade(self, error: CacheUnavailable) -> None:
        """Switch to always-miss storage, logging only the first time."""
        with self._storage_lock:
            if self._degraded:
                return
            self._degraded = True
            self._storage = NullCacheStorage()
        logger.warning(f"{error}; waveforms will be regenerated on every load")
