"""
Sample Scout CLI - Entry point

Commands for indexing a sample library and warming the waveform cache from
the shell. Hosts embedding Sample Scout use Session directly.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from rich.table import Table

from sample_scout.core.config import create_default_config, load_config
from sample_scout.core.output import get_console, log, setup_loguru
from sample_scout.domain.library import format_duration, format_size
from sample_scout.domain.waveform import PeakSet, PeakStatus
from sample_scout.session import Session


def run_scan(session: Session, roots: List[str], show_metadata: bool = False) -> int:
    """Scan library roots and print the resulting index.

    Returns:
        Exit code (0 for success, 1 if nothing could be scanned)
    """
    report = session.scan_library(roots or None)

    table = Table(title=f"{len(report.paths)} samples")
    table.add_column("Sample")
    if show_metadata:
        table.add_column("Duration", justify="right")
        table.add_column("Size", justify="right")

    for record in session.records():
        if show_metadata:
            record = session.describe(record.identity)
            table.add_row(
                record.identity,
                format_duration(record.metadata.get("duration")),
                format_size(record.metadata.get("file_size", 0)),
            )
        else:
            table.add_row(record.identity)

    get_console().print(table)

    if report.partial:
        log(f"Skipped {len(report.skipped_directories)} unreadable directories", "warning")
    if report.directories_scanned == 0:
        return 1
    return 0


def run_peaks(session: Session, files: List[str], poll_interval: float = 0.05) -> int:
    """Load or generate peaks for files, driving the cache like a frame loop.

    Returns:
        Exit code (0 if every file produced peaks, 1 otherwise)
    """
    requests = [session.waveforms.request(path) for path in files]

    while any(request.status is PeakStatus.PENDING for request in requests):
        session.tick()
        time.sleep(poll_interval)
    session.tick()

    failures = 0
    for request in requests:
        result = request.wait()
        if isinstance(result, PeakSet):
            log(
                f"{request.asset}: {result.frame_count} frames, "
                f"{result.channels} channel(s) [{request.key}]",
                "success",
            )
        else:
            failures += 1
            log(f"{request.asset}: {result.reason}", "error")

    if session.waveforms.degraded:
        log("Waveform cache unavailable - peaks were not saved", "warning")
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the sample-scout command."""
    parser = argparse.ArgumentParser(
        description="Sample Scout - index samples and cache waveform peaks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (default: ./config.toml or ~/.config/sample-scout)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan library roots for audio files")
    scan_parser.add_argument(
        "roots", nargs="*", help="Directories to scan (default: configured roots)"
    )
    scan_parser.add_argument(
        "--metadata", action="store_true", help="Read duration and size for each sample"
    )

    peaks_parser = subparsers.add_parser("peaks", help="Load or generate waveform peaks")
    peaks_parser.add_argument("files", nargs="+", help="Audio files")
    peaks_parser.add_argument(
        "--regenerate", action="store_true", help="Ignore cached peaks and overwrite them"
    )

    subparsers.add_parser("config", help="Print the default configuration")

    args = parser.parse_args(argv)

    if args.subcommand == "config":
        print(create_default_config())
        sys.exit(0)

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    level = "DEBUG" if args.verbose else config.logging.level
    log_file = Path(config.logging.log_file) if config.logging.log_file else None
    setup_loguru(log_file, level=level, console_output=True)

    with Session.create(config) as session:
        if args.subcommand == "scan":
            sys.exit(run_scan(session, args.roots, show_metadata=args.metadata))

        elif args.subcommand == "peaks":
            if args.regenerate:
                for path in args.files:
                    session.waveforms.regenerate(path)
            sys.exit(run_peaks(session, args.files))


if __name__ == "__main__":
    main()
