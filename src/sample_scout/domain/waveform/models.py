"""
Waveform peak models.

A PeakSet is the cached summary of one asset's waveform: an ordered tuple of
peak frames, every frame holding the same number of values (min/max per
channel for one time bucket).
"""

from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Union


@dataclass(frozen=True)
class PeakSet:
    """Downsampled amplitude peaks for one asset."""

    frames: tuple[tuple[float, ...], ...] = ()

    @classmethod
    def from_frames(cls, frames: Iterable[Sequence[float]]) -> "PeakSet":
        """Build a PeakSet, coercing values to float.

        Raises:
            ValueError: If frames do not all have the same arity
        """
        converted = tuple(tuple(float(value) for value in frame) for frame in frames)
        if converted:
            arity = len(converted[0])
            if arity == 0:
                raise ValueError("Peak frames must hold at least one value")
            for position, frame in enumerate(converted):
                if len(frame) != arity:
                    raise ValueError(
                        f"Peak frame {position} has {len(frame)} values, expected {arity}"
                    )
        return cls(frames=converted)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def arity(self) -> int:
        """Values per frame (0 for an empty PeakSet)."""
        return len(self.frames[0]) if self.frames else 0

    @property
    def channels(self) -> int:
        """Channel count assuming min/max pairs per channel."""
        return self.arity // 2

    def __len__(self) -> int:
        return len(self.frames)


@dataclass(frozen=True)
class GenerationFailed:
    """Peak generation failed for one asset; nothing was cached."""

    asset: str
    key: str
    reason: str


PeakResult = Union[PeakSet, GenerationFailed]


class PeakStatus(str, Enum):
    """Lifecycle of a peak request."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class PeakRequest:
    """Handle for peaks that may still be generating.

    Returned immediately by the waveform cache. Requests for the same asset
    made while generation is in flight share one underlying future.
    """

    def __init__(self, asset: str, key: str, future: "Future[PeakResult]"):
        self.asset = asset
        self.key = key
        self._future = future

    @classmethod
    def completed(cls, asset: str, key: str, result: PeakResult) -> "PeakRequest":
        """Build an already-finished request (memory hit)."""
        future: Future[PeakResult] = Future()
        future.set_result(result)
        return cls(asset, key, future)

    @property
    def future(self) -> "Future[PeakResult]":
        return self._future

    @property
    def done(self) -> bool:
        return self._future.done()

    @property
    def status(self) -> PeakStatus:
        if not self._future.done():
            return PeakStatus.PENDING
        if isinstance(self._outcome(), PeakSet):
            return PeakStatus.READY
        return PeakStatus.FAILED

    @property
    def peaks(self) -> Optional[PeakSet]:
        """Peaks if ready, else None (pending or failed)."""
        if not self._future.done():
            return None
        result = self._outcome()
        return result if isinstance(result, PeakSet) else None

    @property
    def error(self) -> Optional[GenerationFailed]:
        if not self._future.done():
            return None
        result = self._outcome()
        return result if isinstance(result, GenerationFailed) else None

    def wait(self, timeout: Optional[float] = None) -> PeakResult:
        """Block until the result is available.

        A generation cancelled by closing the cache comes back as
        GenerationFailed.

        Raises:
            concurrent.futures.TimeoutError: If timeout elapses first
        """
        try:
            return self._future.result(timeout=timeout)
        except CancelledError:
            return self._cancelled()

    def _outcome(self) -> PeakResult:
        """Result of a finished future; cancellation counts as a failure."""
        if self._future.cancelled():
            return self._cancelled()
        return self._future.result()

    def _cancelled(self) -> GenerationFailed:
        return GenerationFailed(self.asset, self.key, "generation cancelled")

    def __repr__(self) -> str:
        return f"PeakRequest(asset={self.asset!r}, status={self.status.value})"
