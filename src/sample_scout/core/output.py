"""
Unified output system using Loguru.
Writes every message to the log file and echoes user-facing ones to the console.
"""

import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

from .config import get_data_dir

_console: Optional[Console] = None
_console_echo = True
_console_lock = threading.Lock()

_LEVEL_STYLES = {
    "debug": "cyan",
    "info": "white",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


def get_log_file_path() -> Path:
    """Get the default path to the log file."""
    return get_data_dir() / "sample-scout.log"


def setup_loguru(
    log_file: Optional[Path] = None, level: str = "INFO", console_output: bool = False
) -> Path:
    """
    Configure loguru for file logging.

    Args:
        log_file: Path to log file (default: ~/.local/share/sample-scout/sample-scout.log)
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Whether log() messages are echoed to the console

    Returns:
        Path of the log file in use
    """
    global _console_echo

    log_file = log_file or get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default stderr handler
    logger.remove()

    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    with _console_lock:
        _console_echo = console_output

    logger.info(f"Loguru initialized: {log_file} (level={level})")
    return log_file


def get_console() -> Console:
    """Get or create the shared Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console_echo(enabled: bool) -> None:
    """Enable or disable console echo for log()."""
    global _console_echo
    with _console_lock:
        _console_echo = enabled


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to file AND prints for the user.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message
        level: Log level (debug, info, success, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    with _console_lock:
        echo = _console_echo
    if echo and level != "debug":
        get_console().print(message, style=_LEVEL_STYLES.get(level, "white"), markup=False)
