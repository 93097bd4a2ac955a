"""Tests for sample metadata extraction."""

import wave
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sample_scout.domain.library.metadata import (
    extract_metadata_from_filename,
    format_duration,
    format_size,
    get_tag_value,
    read_metadata,
)


def write_wav(path: Path, frames: int = 4410, rate: int = 44100) -> Path:
    """Write a silent 16-bit mono wav file."""
    with wave.open(str(path), "wb") as f:
        f.setnchannels(1)
        f.setsampwidth(2)
        f.setframerate(rate)
        f.writeframes(b"\x00\x00" * frames)
    return path


class TestReadMetadata:
    """Tests for read_metadata function."""

    def test_non_audio_falls_back_to_filename(self, tmp_path):
        path = tmp_path / "Kick Drum.wav"
        path.write_text("definitely not audio")

        metadata = read_metadata(str(path))

        assert metadata["title"] == "Kick Drum"
        assert metadata["format"] == "wav"
        assert metadata["file_size"] == len("definitely not audio")
        assert "duration" not in metadata

    def test_missing_file_does_not_raise(self, tmp_path):
        metadata = read_metadata(str(tmp_path / "gone.flac"))
        assert metadata["title"] == "gone"
        assert metadata["file_size"] == 0

    def test_wav_duration(self, tmp_path):
        path = write_wav(tmp_path / "hat.wav", frames=22050, rate=44100)

        metadata = read_metadata(str(path))

        assert metadata["duration"] == pytest.approx(0.5)
        assert metadata["sample_rate"] == 44100
        assert metadata["channels"] == 1

    def test_tags_are_read(self, tmp_path):
        path = tmp_path / "loop.flac"
        path.write_bytes(b"")
        tags = {"title": ["Break Loop"], "artist": ["Someone"], "genre": ["drums; breaks"]}
        audio = MagicMock()
        audio.info = None
        audio.tags = tags
        audio.get.side_effect = tags.get

        with patch("sample_scout.domain.library.metadata.MutagenFile", return_value=audio):
            metadata = read_metadata(str(path))

        assert metadata["title"] == "Break Loop"
        assert metadata["artist"] == "Someone"
        assert metadata["tags"] == ["drums", "breaks"]


class TestHelpers:
    """Tests for tag and formatting helpers."""

    def test_get_tag_value_tries_names_in_order(self):
        audio = {"TITLE": ["Upper"]}
        assert get_tag_value(audio, ["TIT2", "title", "TITLE"]) == "Upper"

    def test_get_tag_value_missing(self):
        assert get_tag_value({}, ["TIT2"]) is None

    def test_extract_metadata_from_filename(self, tmp_path):
        path = tmp_path / "Snare.FLAC"
        path.write_bytes(b"1234")
        assert extract_metadata_from_filename(str(path)) == {
            "title": "Snare",
            "format": "flac",
            "file_size": 4,
        }

    @pytest.mark.parametrize(
        "seconds,expected",
        [(None, "?:??"), (0.25, "0:00.250"), (61.5, "1:01.500")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_size(self):
        assert format_size(512) == "512.0 B"
        assert format_size(2048) == "2.0 KB"
