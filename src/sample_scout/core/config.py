"""
Configuration management for Sample Scout
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

DEFAULT_EXTENSIONS = ["wav", "mp3", "flac", "ogg", "m4a"]
KEY_STRATEGIES = {"path", "stem"}


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "sample-scout"
    return Path.home() / ".config" / "sample-scout"


def get_data_dir() -> Path:
    """Get the data directory path (logs)."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "sample-scout"
    return Path.home() / ".local" / "share" / "sample-scout"


def get_cache_dir() -> Path:
    """Get the default waveform cache directory path."""
    cache_home = os.environ.get("XDG_CACHE_HOME")
    if cache_home:
        return Path(cache_home) / "sample-scout" / "waveforms"
    return Path.home() / ".cache" / "sample-scout" / "waveforms"


@dataclass
class LibraryConfig:
    """Configuration for sample library scanning."""

    roots: List[str] = field(default_factory=lambda: [str(Path.home() / "Samples")])
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    def validate(self) -> None:
        """Validate library configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not self.extensions:
            raise ValueError("At least one audio extension is required")
        for ext in self.extensions:
            if not ext or not ext.strip(". "):
                raise ValueError(f"Invalid audio extension: {ext!r}")


@dataclass
class CacheConfig:
    """Configuration for the waveform peak cache."""

    root: str = field(default_factory=lambda: str(get_cache_dir()))
    resolution: int = 100  # Peak frames per second of audio
    max_workers: int = 2  # Concurrent peak generation tasks
    key_strategy: str = "path"  # 'path' (collision-free) or 'stem' (legacy layout)

    def validate(self) -> None:
        """Validate cache configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.resolution <= 0:
            raise ValueError(f"Cache resolution must be positive, got {self.resolution}")
        if self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.key_strategy not in KEY_STRATEGIES:
            raise ValueError(
                f"Invalid key_strategy: {self.key_strategy!r}. "
                f"Valid strategies are: {sorted(KEY_STRATEGIES)}"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/sample-scout/sample-scout.log)
    )
    console_output: bool = False  # Also echo log() messages to the console


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def normalize_extensions(extensions: List[str]) -> frozenset[str]:
    """Pure function - lowercase extensions without leading dots."""
    return frozenset(ext.strip().lstrip(".").lower() for ext in extensions if ext.strip())


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. SAMPLE_SCOUT_CONFIG environment variable
    2. Current working directory
    3. XDG_CONFIG_HOME/sample-scout (or ~/.config/sample-scout)
    """
    env_config = os.environ.get("SAMPLE_SCOUT_CONFIG")
    if env_config:
        return Path(env_config).expanduser()

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Sample Scout Configuration

[library]
# Directories to scan for samples
roots = ["~/Samples"]

# Audio file extensions to index (case-insensitive)
extensions = ["wav", "mp3", "flac", "ogg", "m4a"]

[cache]
# Directory holding cached waveform peaks (default: ~/.cache/sample-scout/waveforms)
# root = "/path/to/waveforms"

# Peak frames per second of audio
resolution = 100

# Number of waveforms generated in parallel
max_workers = 2

# Cache file naming: "path" (unique per file) or "stem" (file name only, legacy)
key_strategy = "path"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/sample-scout/sample-scout.log)
# log_file = "/path/to/custom/sample-scout.log"

# Also print log messages to the console
console_output = false
""".strip()


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults per key.

    Raises:
        ValueError: If a section holds invalid values
    """
    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            roots=[
                str(Path(p).expanduser())
                for p in library_data.get("roots", config.library.roots)
            ],
            extensions=[
                ext.lstrip(".").lower()
                for ext in library_data.get("extensions", config.library.extensions)
            ],
        )
        config.library.validate()

    if "cache" in toml_data:
        cache_data = toml_data["cache"]
        config.cache = CacheConfig(
            root=str(Path(cache_data.get("root", config.cache.root)).expanduser()),
            resolution=cache_data.get("resolution", config.cache.resolution),
            max_workers=cache_data.get("max_workers", config.cache.max_workers),
            key_strategy=cache_data.get("key_strategy", config.cache.key_strategy),
        )
        config.cache.validate()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, or defaults when there is none.

    A missing file is not an error. An unreadable or invalid file is logged
    and the defaults are used so the session still starts.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        logger.debug(f"No configuration at {config_path}, using defaults")
        return Config()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        return parse_config(toml_data)

    except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        logger.warning("Using default configuration.")
        return Config()


def write_default_config(config_path: Optional[Path] = None) -> Path:
    """Write the default configuration file if none exists yet."""
    config_path = config_path or get_config_dir() / "config.toml"
    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config() + "\n")
        logger.info(f"Created default configuration at: {config_path}")
    return config_path
