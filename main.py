#!/usr/bin/env python3
"""Catan Universe Patcher - Entry Point"""

from __future__ import annotations

import argparse
import faulthandler
import logging
import os
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

from catan_patcher import locate_and_apply
from patcher_config import PatcherSettings
from patcher_errors import PatcherError

PROMPT = "No option provided. Do you want to install cracked files to Catan Universe? [Y/n]: "
HELP_FLAGS = ("-h", "--help")

LOG_FILENAME = "catanpatcher.log"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUPS = 2


def default_log_dir() -> Path:
    override = os.environ.get("CATANPATCH_LOG_DIR")
    if override:
        return Path(override).expanduser()
    state_home = os.environ.get("XDG_STATE_HOME") or Path.home() / ".local" / "state"
    return Path(state_home) / "CatanPatcher"


def setup_logging(log_dir: Path | None = None) -> tuple[logging.Logger, Path]:
    """Send every module's records to a rotating catanpatcher.log.

    The terminal only sees what CatanPatcher prints; the file also holds the
    debug trail of library roots, manifests and folders that were checked.
    """
    log_dir = log_dir or default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s  %(levelname)-8s  %(name)s: %(message)s")
    )

    # Attach to root: steam_library, install_locator etc. log under their own names
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(file_handler)
    return logging.getLogger("catanpatcher"), log_dir


def install_crash_handler(logger: logging.Logger, log_dir: Path):
    """Record crashes that escape main(): Python tracebacks and native faults."""

    def log_uncaught(exc_type, exc_value, exc_tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            trace = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
            logger.critical("Patcher crashed:\n%s", trace)
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = log_uncaught

    # Native faults bypass logging entirely
    faulthandler.enable((log_dir / "crash.log").open("w"), all_threads=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catan-patcher",
        description="Find Catan Universe in your Steam libraries and install or restore its data files.",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--find-catan", "--install", dest="mode", action="store_const", const="install",
        help='Search Steam library folders for installed "Catan Universe" app(s) and install cracked files.',
    )
    parser.add_argument(
        "--uninstall", dest="mode", action="store_const", const="restore",
        help='Search Steam library folders for installed "Catan Universe" app(s) and restore original files.',
    )
    parser.add_argument(
        "-h", "--help", action="store_true",
        help="Show this help message.",
    )
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Interpret the first argument only. Anything unrecognised means install.

    The token is matched literally rather than through argparse, so forms
    argparse would reject (``--uninstall=now``, ``-hx``) still install.
    """
    first = argv[0] if argv else ""
    if first in HELP_FLAGS:
        return argparse.Namespace(mode=None, help=True)
    mode = "restore" if first == "--uninstall" else "install"
    return argparse.Namespace(mode=mode, help=False)


def confirm_install(input_fn=None) -> bool:
    try:
        reply = (input_fn or input)(PROMPT)
    except EOFError:
        return False
    return reply.strip() in ("", "y", "Y")


def run(mode: str, settings: PatcherSettings | None = None) -> int:
    try:
        locate_and_apply(mode, settings)
    except PatcherError as e:
        print(str(e), file=sys.stderr)
        logging.getLogger("catanpatcher").error("Run failed (exit %d): %s", e.exit_code, e)
        return e.exit_code
    return 0


def main(argv: list[str] | None = None, settings: PatcherSettings | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        if not confirm_install():
            print("Aborted.")
            return 0
        return run("install", settings)

    args = parse_args(argv)
    if args.help:
        build_parser().print_help()
        return 0
    return run(args.mode, settings)


def cli() -> None:
    logger, log_dir = setup_logging()
    install_crash_handler(logger, log_dir)
    logger.info("Starting Catan Universe Patcher")
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    cli()
