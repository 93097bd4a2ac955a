"""Waveform peak generation using pydub and numpy.

Decodes an audio file and reduces it to min/max peaks per channel. Bucket
width depends only on the sample rate and the target resolution, and values
are rounded to a fixed precision, so the same audio always yields the same
PeakSet.
"""

from pathlib import Path
from typing import Protocol

import numpy as np
from loguru import logger
from pydub import AudioSegment

from sample_scout.errors import DecodeError

from .models import PeakSet

PEAK_DECIMALS = 6
MAX_AUDIO_SIZE_MB = 500  # Prevent OOM on huge files


class PeakGenerator(Protocol):
    """Protocol for peak generators supplied by the host audio subsystem."""

    def __call__(self, asset: str, resolution: int) -> PeakSet:
        """Produce peaks for an asset.

        Raises:
            DecodeError: If the audio cannot be read
        """
        ...


def bucket_width(frame_rate: int, resolution: int) -> int:
    """Pure function - samples per peak frame for a resolution in frames/second."""
    if resolution <= 0:
        raise ValueError(f"Resolution must be positive, got {resolution}")
    return max(1, int(frame_rate) // int(resolution))


def compute_peaks(
    samples: np.ndarray,
    channels: int,
    frame_rate: int,
    sample_width: int,
    resolution: int,
) -> PeakSet:
    """Pure function - reduce interleaved integer samples to peak frames.

    Args:
        samples: Interleaved signed integer samples
        channels: Number of interleaved channels
        frame_rate: Sample frames per second
        sample_width: Bytes per sample (sets the full-scale value)
        resolution: Peak frames per second of audio

    Returns:
        PeakSet whose frames are (min_ch0, max_ch0, min_ch1, max_ch1, ...)
        scaled to [-1, 1]
    """
    if channels <= 0:
        raise ValueError(f"Invalid channel count: {channels}")

    data = np.asarray(samples)
    usable = (len(data) // channels) * channels
    data = data[:usable].reshape(-1, channels)
    if len(data) == 0:
        return PeakSet()

    width = bucket_width(frame_rate, resolution)
    starts = np.arange(0, len(data), width)

    # reduceat handles the shorter final bucket
    mins = np.minimum.reduceat(data, starts, axis=0).astype(np.float64)
    maxs = np.maximum.reduceat(data, starts, axis=0).astype(np.float64)

    full_scale = float(1 << (8 * sample_width - 1))
    interleaved = np.empty((len(starts), channels * 2), dtype=np.float64)
    interleaved[:, 0::2] = mins / full_scale
    interleaved[:, 1::2] = maxs / full_scale
    interleaved = np.clip(np.round(interleaved, PEAK_DECIMALS), -1.0, 1.0)

    return PeakSet(frames=tuple(tuple(float(value) for value in row) for row in interleaved))


def generate_peaks(asset: str, resolution: int) -> PeakSet:
    """Decode an audio file with pydub and compute its peaks.

    WAV files are decoded natively; other formats need ffmpeg on PATH.

    Raises:
        DecodeError: If the file is missing, too large or cannot be decoded
    """
    path = Path(asset)
    try:
        file_size_mb = path.stat().st_size / (1024 * 1024)
    except OSError as e:
        raise DecodeError(asset, f"cannot stat file: {e}") from e

    if file_size_mb > MAX_AUDIO_SIZE_MB:
        raise DecodeError(
            asset, f"file too large: {file_size_mb:.1f}MB > {MAX_AUDIO_SIZE_MB}MB"
        )

    try:
        audio = AudioSegment.from_file(str(path))
    except FileNotFoundError as e:
        if "ffmpeg" in str(e).lower() or "ffprobe" in str(e).lower():
            raise DecodeError(asset, "ffmpeg not found. Install: apt install ffmpeg") from e
        raise DecodeError(asset, str(e)) from e
    except Exception as e:
        raise DecodeError(asset, f"failed to decode audio: {type(e).__name__}: {e}") from e

    samples = np.array(audio.get_array_of_samples())
    peaks = compute_peaks(
        samples,
        channels=audio.channels,
        frame_rate=audio.frame_rate,
        sample_width=audio.sample_width,
        resolution=resolution,
    )
    logger.debug(
        f"Generated {peaks.frame_count} peak frames for {asset} "
        f"({audio.channels}ch, {audio.frame_rate}Hz)"
    )
    return peaks
