"""Tests for waveform peak models."""

from concurrent.futures import Future

import pytest

from sample_scout.domain.waveform.models import (
    GenerationFailed,
    PeakRequest,
    PeakSet,
    PeakStatus,
)


class TestPeakSet:
    """Tests for PeakSet construction."""

    def test_from_frames_coerces_to_float(self):
        peaks = PeakSet.from_frames([[0, 1], [-1, 0.5]])
        assert peaks.frames == ((0.0, 1.0), (-1.0, 0.5))
        assert peaks.channels == 1
        assert len(peaks) == 2

    def test_ragged_frames(self):
        with pytest.raises(ValueError):
            PeakSet.from_frames([[0.1, 0.2], [0.3]])

    def test_empty(self):
        assert PeakSet().arity == 0


class TestPeakRequest:
    """Tests for PeakRequest status reporting."""

    def test_pending(self):
        request = PeakRequest("/lib/kick.wav", "kick", Future())
        assert request.status is PeakStatus.PENDING
        assert request.peaks is None
        assert request.error is None

    def test_completed(self):
        peaks = PeakSet.from_frames([(-0.5, 0.5)])
        request = PeakRequest.completed("/lib/kick.wav", "kick", peaks)
        assert request.status is PeakStatus.READY
        assert request.peaks == peaks

    def test_cancelled_future_is_a_failure(self):
        """A cancelled generation reads as failed and never raises."""
        future = Future()
        assert future.cancel()
        request = PeakRequest("/lib/kick.wav", "kick", future)

        assert request.done
        assert request.status is PeakStatus.FAILED
        assert request.peaks is None
        assert request.error == GenerationFailed("/lib/kick.wav", "kick", "generation cancelled")
        assert request.wait(0) == request.error
        assert repr(request) == "PeakRequest(asset='/lib/kick.wav', status=failed)"
