"""
Logging setup for the firstrun CLI.

``setup_logging`` owns the root logger and replaces its handlers on
every call. The CLI calls it once per process for the console, then
again with ``run_dir`` when a command is about to change the machine,
which adds a timestamped log for that run under the settings' log_dir.

Console level, highest precedence first:
    --debug  >  --verbose  >  --quiet  >  FIRSTRUN_LOG_LEVEL  >  WARNING

FIRSTRUN_LOG_FILE / FIRSTRUN_LOG_FILE_LEVEL add a fixed log file on top.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

LEVEL_ENV = "FIRSTRUN_LOG_LEVEL"
FILE_ENV = "FIRSTRUN_LOG_FILE"
FILE_LEVEL_ENV = "FIRSTRUN_LOG_FILE_LEVEL"

RUN_LOG_PREFIX = "firstrun-"

# Console detail grows only at INFO and below
_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s  %(message)s", "%H:%M:%S"),
]
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def parse_level(level: str | int | None, default: int = logging.WARNING) -> int:
    """Numeric level for a name like ``"info"``; unknown names give ``default``."""
    if isinstance(level, int):
        return level
    if not level:
        return default
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else default


def console_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Resolve the console level from CLI flags and the environment."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    env = os.environ if environ is None else environ
    return parse_level(env.get(LEVEL_ENV))


def run_log_path(run_dir: Path, when: datetime | None = None) -> Path:
    """Where the log for a run started at ``when`` goes."""
    return run_dir / f"{RUN_LOG_PREFIX}{(when or datetime.now()):%Y%m%d-%H%M%S}.log"


def _console_format(level: int) -> tuple[str, str | None]:
    for limit, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= limit:
            return fmt, datefmt
    return "%(message)s", None


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def setup_logging(
    level: str | int = logging.WARNING,
    *,
    log_file: str | Path | None = None,
    log_file_level: str | int | None = None,
    run_dir: Path | None = None,
    run_level: str | int = logging.INFO,
) -> Path | None:
    """Configure the root logger.

    Args:
        level: Console level (name or number).
        log_file: Optional fixed log file, e.g. from FIRSTRUN_LOG_FILE.
        log_file_level: Level for ``log_file``; defaults to ``level``.
        run_dir: If set, also log this run to a new timestamped file here.
        run_level: Level for the per-run file.

    Returns:
        Path of the per-run log file, or None when ``run_dir`` is unset.
    """
    console_lvl = parse_level(level)
    fmt, datefmt = _console_format(console_lvl)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_lvl)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    handlers: list[logging.Handler] = [console]

    if log_file:
        handlers.append(_file_handler(Path(log_file), parse_level(log_file_level, console_lvl)))

    run_path = None
    if run_dir is not None:
        run_path = run_log_path(run_dir)
        handlers.append(_file_handler(run_path, parse_level(run_level, logging.INFO)))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        if isinstance(old, logging.FileHandler):
            old.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False
    return run_path
