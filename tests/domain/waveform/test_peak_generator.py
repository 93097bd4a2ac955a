"""Tests for waveform peak generation."""

import array
import wave
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from sample_scout.domain.waveform.generator import (
    bucket_width,
    compute_peaks,
    generate_peaks,
)
from sample_scout.domain.waveform.models import PeakSet
from sample_scout.errors import DecodeError


def write_wav(path: Path, samples: list[int], rate: int, channels: int = 1) -> Path:
    """Write interleaved 16-bit samples to a wav file."""
    with wave.open(str(path), "wb") as f:
        f.setnchannels(channels)
        f.setsampwidth(2)
        f.setframerate(rate)
        f.writeframes(array.array("h", samples).tobytes())
    return path


class TestBucketWidth:
    """Tests for bucket_width function."""

    def test_samples_per_frame(self):
        assert bucket_width(44100, 100) == 441

    def test_at_least_one_sample(self):
        assert bucket_width(8, 100) == 1

    def test_invalid_resolution(self):
        with pytest.raises(ValueError):
            bucket_width(44100, 0)


class TestComputePeaks:
    """Tests for compute_peaks function."""

    def test_stereo_min_max_pairs(self):
        left = [16384, -8192, 4096, -32768]
        right = [0, 8192, -16384, 32767]
        interleaved = np.array(
            [value for pair in zip(left, right) for value in pair], dtype=np.int16
        )

        peaks = compute_peaks(
            interleaved, channels=2, frame_rate=4, sample_width=2, resolution=2
        )

        assert peaks.frames == (
            (-0.25, 0.5, 0.0, 0.25),
            (-1.0, 0.125, -0.5, 0.999969),
        )
        assert peaks.channels == 2

    def test_short_final_bucket(self):
        samples = np.array([0, 64, -64, 32, -32], dtype=np.int8)

        peaks = compute_peaks(samples, channels=1, frame_rate=2, sample_width=1, resolution=1)

        assert peaks.frames == ((0.0, 0.5), (-0.5, 0.25), (-0.25, -0.25))

    def test_empty_audio(self):
        peaks = compute_peaks(
            np.array([], dtype=np.int16), channels=1, frame_rate=44100, sample_width=2, resolution=100
        )
        assert peaks == PeakSet()

    def test_values_in_range(self):
        rng = np.random.default_rng(7)
        samples = rng.integers(-32768, 32767, size=44100, dtype=np.int16)

        peaks = compute_peaks(samples, channels=1, frame_rate=44100, sample_width=2, resolution=100)

        assert peaks.frame_count == 100
        for low, high in peaks.frames:
            assert -1.0 <= low <= high <= 1.0

    def test_invalid_channels(self):
        with pytest.raises(ValueError):
            compute_peaks(np.zeros(4), channels=0, frame_rate=8, sample_width=2, resolution=1)


class TestGeneratePeaks:
    """Tests for generate_peaks with real wav files."""

    def test_mono_wav(self, tmp_path):
        path = write_wav(
            tmp_path / "kick.wav",
            [0, 2000, -2000, 1000, -1000, 0, 1500, -1500],
            rate=8,
        )

        peaks = generate_peaks(str(path), resolution=2)

        assert peaks.frames == ((-0.061035, 0.061035), (-0.045776, 0.045776))

    def test_deterministic(self, tmp_path):
        samples = [int(8000 * np.sin(i / 5.0)) for i in range(800)]
        path = write_wav(tmp_path / "tone.wav", samples, rate=400)

        assert generate_peaks(str(path), 10) == generate_peaks(str(path), 10)

    def test_stereo_wav(self, tmp_path):
        path = write_wav(tmp_path / "wide.wav", [100, -100] * 8, rate=8, channels=2)

        peaks = generate_peaks(str(path), resolution=1)

        assert peaks.channels == 2
        assert peaks.frame_count == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError, match="cannot stat"):
            generate_peaks(str(tmp_path / "gone.wav"), 100)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"this is not a riff file")

        with pytest.raises(DecodeError) as exc_info:
            generate_peaks(str(path), 100)
        assert exc_info.value.asset == str(path)

    def test_oversized_file(self, tmp_path):
        path = write_wav(tmp_path / "big.wav", [0] * 16, rate=8)

        with patch("sample_scout.domain.waveform.generator.MAX_AUDIO_SIZE_MB", 0):
            with pytest.raises(DecodeError, match="too large"):
                generate_peaks(str(path), 100)
