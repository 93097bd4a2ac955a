"""Tests for waveform cache key derivation."""

import pytest

from sample_scout.domain.waveform.keys import (
    PATH_STRATEGY,
    STEM_STRATEGY,
    cache_key,
    path_key,
    stem_key,
)


class TestStemKey:
    """Tests for the legacy stem key."""

    def test_file_name_without_extension(self):
        assert stem_key("/lib/drums/kick_01.wav") == "kick_01"

    def test_same_name_in_different_folders_collides(self):
        assert stem_key("/lib/a/kick.wav") == stem_key("/lib/b/kick.wav")

    def test_keeps_trailing_word_run(self):
        """Only the run of word characters and dashes before the extension is kept."""
        assert stem_key("/lib/my kick.wav") == "kick"

    def test_unmatched_name_is_sanitized(self):
        assert stem_key("/lib/kick (1)") == "kick_1_"


class TestPathKey:
    """Tests for the collision-free path key."""

    def test_different_folders_differ(self):
        assert path_key("/lib/a/kick.wav") != path_key("/lib/b/kick.wav")

    def test_readable_prefix(self):
        key = path_key("/lib/a/kick.wav")
        stem, digest = key.rsplit("-", 1)
        assert stem == "kick"
        assert len(digest) == 16
        int(digest, 16)

    def test_separator_spelling_does_not_matter(self):
        assert path_key("/lib/a/kick.wav") == path_key("/lib//a/kick.wav")

    def test_deterministic(self):
        assert path_key("/lib/a/kick.wav") == path_key("/lib/a/kick.wav")

    def test_unsafe_characters_are_replaced(self):
        key = path_key("/lib/my kick?.wav")
        assert key.startswith("my_kick-")
        assert "/" not in key


class TestCacheKey:
    """Tests for cache_key strategy dispatch."""

    def test_default_is_path(self):
        assert cache_key("/lib/kick.wav") == path_key("/lib/kick.wav")

    def test_strategies(self):
        assert cache_key("/lib/kick.wav", PATH_STRATEGY) == path_key("/lib/kick.wav")
        assert cache_key("/lib/kick.wav", STEM_STRATEGY) == "kick"

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown cache key strategy"):
            cache_key("/lib/kick.wav", "md5")
