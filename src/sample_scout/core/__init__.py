"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Path normalization
- Logging and console output (Loguru, Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    CacheConfig,
    LibraryConfig,
    LoggingConfig,
    load_config,
    parse_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_cache_dir,
    create_default_config,
    write_default_config,
)

# Paths
from .paths import absolute, normalize, join

# Output
from .output import setup_loguru, get_console, log

__all__ = [
    # Config
    "Config",
    "CacheConfig",
    "LibraryConfig",
    "LoggingConfig",
    "load_config",
    "parse_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_cache_dir",
    "create_default_config",
    "write_default_config",
    # Paths
    "absolute",
    "normalize",
    "join",
    # Output
    "setup_loguru",
    "get_console",
    "log",
]
