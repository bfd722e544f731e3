"""Logging setup for the command-line entrypoint.

Every module logs through ``logging.getLogger(__name__)``; this module
configures the root logger once per process. Console records go to
stderr so they never mix with the rich report on stdout.

Levels are resolved in precedence order:
    --log-level flag  >  WSL_BOOTSTRAP_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import os
import sys

from wsl_bootstrap.config import LOG_LEVEL_ENV

_FMT_MINIMAL = "%(levelname)s: %(message)s"

_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

_FMT_DEBUG = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output always carries full detail
_FMT_FILE = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(cli_level: str | None = None) -> str:
    """Pick the effective level name from the flag, the environment, or the default."""
    return (cli_level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure logging for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to a log file.
        log_file_level: Separate level for the file. Defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value, defaulting to WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
