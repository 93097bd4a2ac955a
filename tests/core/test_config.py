"""Tests for TOML configuration loading."""

from pathlib import Path

import pytest

from sample_scout.core.config import (
    DEFAULT_EXTENSIONS,
    CacheConfig,
    Config,
    LibraryConfig,
    create_default_config,
    get_config_path,
    load_config,
    normalize_extensions,
    parse_config,
    write_default_config,
)


class TestParseConfig:
    """Tests for parse_config function."""

    def test_empty_document_gives_defaults(self):
        config = parse_config({})
        assert config.cache.resolution == 100
        assert config.cache.max_workers == 2
        assert config.cache.key_strategy == "path"
        assert config.library.extensions == DEFAULT_EXTENSIONS
        assert config.logging.level == "INFO"

    def test_sections_are_read(self):
        config = parse_config(
            {
                "library": {"roots": ["/samples"], "extensions": [".WAV", "aiff"]},
                "cache": {
                    "root": "/tmp/peaks",
                    "resolution": 50,
                    "max_workers": 4,
                    "key_strategy": "stem",
                },
                "logging": {"level": "debug", "console_output": True},
            }
        )
        assert config.library.roots == ["/samples"]
        assert config.library.extensions == ["wav", "aiff"]
        assert config.cache.root == "/tmp/peaks"
        assert config.cache.resolution == 50
        assert config.cache.max_workers == 4
        assert config.cache.key_strategy == "stem"
        assert config.logging.level == "DEBUG"
        assert config.logging.console_output is True

    def test_missing_keys_fall_back_to_defaults(self):
        config = parse_config({"cache": {"resolution": 25}})
        assert config.cache.resolution == 25
        assert config.cache.max_workers == 2
        assert config.cache.key_strategy == "path"

    def test_roots_expand_user(self):
        config = parse_config({"library": {"roots": ["~/Samples"]}})
        assert config.library.roots == [str(Path.home() / "Samples")]

    @pytest.mark.parametrize(
        "cache",
        [
            {"resolution": 0},
            {"max_workers": -1},
            {"key_strategy": "md5"},
        ],
    )
    def test_invalid_cache_values_raise(self, cache):
        with pytest.raises(ValueError):
            parse_config({"cache": cache})

    def test_empty_extension_list_raises(self):
        with pytest.raises(ValueError):
            parse_config({"library": {"extensions": []}})


class TestValidate:
    """Tests for section validation."""

    def test_default_sections_are_valid(self):
        LibraryConfig().validate()
        CacheConfig().validate()

    def test_blank_extension_is_invalid(self):
        with pytest.raises(ValueError, match="Invalid audio extension"):
            LibraryConfig(extensions=["wav", "."]).validate()


class TestNormalizeExtensions:
    """Tests for normalize_extensions function."""

    def test_strips_dots_and_lowercases(self):
        assert normalize_extensions([".WAV", "Flac", " mp3 "]) == frozenset(
            {"wav", "flac", "mp3"}
        )

    def test_drops_blank_entries(self):
        assert normalize_extensions(["", "  ", "ogg"]) == frozenset({"ogg"})


class TestLoadConfig:
    """Tests for load_config and default config files."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.toml")
        assert isinstance(config, Config)
        assert config.cache.resolution == 100

    def test_reads_file(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text('[cache]\nresolution = 20\nkey_strategy = "stem"\n')

        config = load_config(config_path)

        assert config.cache.resolution == 20
        assert config.cache.key_strategy == "stem"

    def test_malformed_toml_gives_defaults(self, tmp_path):
        """A broken config file should not stop the session from starting."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("[cache\nresolution = ")

        config = load_config(config_path)

        assert config.cache.resolution == 100

    def test_invalid_values_give_defaults(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text("[cache]\nmax_workers = 0\n")

        config = load_config(config_path)

        assert config.cache.max_workers == 2

    def test_default_config_parses(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text(create_default_config())

        config = load_config(config_path)

        assert config.cache.key_strategy == "path"
        assert config.library.extensions == DEFAULT_EXTENSIONS

    def test_write_default_config(self, tmp_path):
        config_path = tmp_path / "nested" / "config.toml"

        written = write_default_config(config_path)

        assert written == config_path
        assert "[cache]" in config_path.read_text()

    def test_write_default_config_keeps_existing(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text("# mine\n")

        write_default_config(config_path)

        assert config_path.read_text() == "# mine\n"

    def test_env_var_overrides_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SAMPLE_SCOUT_CONFIG", str(tmp_path / "custom.toml"))
        assert get_config_path() == tmp_path / "custom.toml"

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SAMPLE_SCOUT_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert get_config_path() == tmp_path / "xdg" / "sample-scout" / "config.toml"
