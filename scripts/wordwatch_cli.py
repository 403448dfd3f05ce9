#!/usr/bin/env python
"""
wordwatch_cli.py  –  terminal front-end for the directory monitor

Prompts for a directory (or takes one on the command line), watches it for
new text files and writes a word-frequency report next to each one.
Press Enter to end a watch session.
"""
import pathlib, sys
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import argparse
import logging
from typing import Optional

from wordwatch.config import CONFIG
from wordwatch.errors import InvalidTargetError
from wordwatch.ingestion.watcher import DirectoryWatcher

EXIT_WORDS = {"exit", "quit", "q"}

LOG = logging.getLogger("wordwatch.cli")


def _configure_logging(level: Optional[str]) -> None:
    logging.basicConfig(
        level=(level or CONFIG.get("logging.level", "INFO")).upper(),
        format=CONFIG.get("logging.format"),
        datefmt=CONFIG.get("logging.datefmt"),
        force=True,
    )


def _announce(report_path: pathlib.Path) -> None:
    LOG.info("Data written to '%s'.", report_path.name)


def _run_session(directory: str, delay: Optional[float]) -> bool:
    """
    Watch *directory* until the operator presses Enter.

    Returns:
        False if the directory was rejected, True otherwise
    """
    watcher = DirectoryWatcher(delay=delay, on_report=_announce)
    try:
        watcher.start(directory)
    except InvalidTargetError as e:
        LOG.debug("Rejected %r: %s", directory, e)
        return False

    with watcher:
        try:
            input()
        except EOFError:
            pass
    return True


def main(argv=None) -> int:
    """
    Parses command-line arguments and runs either a single watch session
    (directory given) or the interactive prompt loop.
    """
    parser = argparse.ArgumentParser(
        description="Watch a directory for new text files and write word-frequency reports."
    )
    parser.add_argument(
        "directory",
        nargs="?",
        help="Directory to monitor. If omitted, prompts for one interactively.",
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--delay", type=float, help="Debounce delay in seconds")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args(argv)

    if args.config:
        CONFIG.reload(args.config)
    _configure_logging(args.log_level)

    if args.delay is not None and args.delay <= 0:
        parser.error("--delay must be positive")

    if args.directory:
        # --- One-shot mode ---
        try:
            if not _run_session(args.directory, args.delay):
                print("ERROR: Directory does not exist. Enter valid directory.", file=sys.stderr)
                return 1
        except KeyboardInterrupt:
            print("\nExiting.")
        return 0

    # --- Interactive mode ---
    print("Type 'exit', 'quit', or 'q' to leave.")
    try:
        while True:
            print("Enter file directory to be monitored:")
            directory = input(">> ").strip()
            if directory.lower() in EXIT_WORDS:
                print("Exiting.")
                break
            if not _run_session(directory, args.delay):
                print("ERROR: Directory does not exist. Enter valid directory.")
    except (EOFError, KeyboardInterrupt):
        # Ctrl+D (EOFError) or Ctrl+C (KeyboardInterrupt)
        print("\nExiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
