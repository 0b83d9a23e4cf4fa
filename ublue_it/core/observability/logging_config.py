"""
Logging configuration — set up once by the CLI before any work starts.

Every module logs through ``logging.getLogger(__name__)`` under the
``ublue_it`` namespace. User-facing progress is printed by the CLI with
click; logging is for diagnostics, so the console default is WARNING.

Level precedence:
    --debug / --verbose / --quiet  >  $UBLUE_IT_LOG_LEVEL  >  WARNING

A log file can be added with $UBLUE_IT_LOG_FILE (and its own level via
$UBLUE_IT_LOG_FILE_LEVEL). rpm-ostree output is never logged; it goes
straight to the terminal.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "UBLUE_IT_LOG_LEVEL"
LOG_FILE_ENV = "UBLUE_IT_LOG_FILE"
LOG_FILE_LEVEL_ENV = "UBLUE_IT_LOG_FILE_LEVEL"

# (highest level the format applies to, format, datefmt), most verbose first
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-7s [%(process)d] %(name)s  %(message)s"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for limit, f, d in _CONSOLE_FORMATS if level <= limit)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def setup_logging(
    level: str | None = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with ours.

    Args:
        level: Console level name. Unknown names fall back to WARNING.
        log_file: Optional file to append to.
        log_file_level: Level for the file (default: ``level``).
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    logging.basicConfig(level=root_level, handlers=handlers, force=True)
    # A closed terminal must not turn a log call into a crash mid-rebase.
    logging.raiseExceptions = False


def setup_logging_from_env(level: str) -> None:
    """``setup_logging`` with the log file taken from the environment."""
    setup_logging(
        level=level,
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


def _parse_level(level: str | None) -> int:
    value = logging.getLevelName((level or "").upper())
    return value if isinstance(value, int) else logging.WARNING
