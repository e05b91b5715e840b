"""Logging setup for the CLI: console on stderr plus a dated file."""

import logging
import sys
from datetime import datetime
from pathlib import Path

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOG_DATE_FORMAT = "%H:%M:%S"
_LOGGERS_CACHE: dict[str, logging.Logger] = {}


def setup_logger(
    name: str,
    level: int | str = logging.INFO,
    log_dir: Path = Path("logs"),
) -> logging.Logger:
    """Configure and return a logger with console and file handlers.

    Module loggers created with ``logging.getLogger(__name__)`` below
    ``name`` propagate to the handlers installed here. A second call
    with the same name returns the logger configured by the first.

    Args:
        name: Root logger name of the package (e.g., 'src').
        level: Level as int or name such as 'DEBUG'.
        log_dir: Directory of the dated log files.

    Returns:
        Configured logger instance.
    """
    if name in _LOGGERS_CACHE:
        return _LOGGERS_CACHE[name]

    level = _resolve_level(level)
    formatter = logging.Formatter(_LOG_FORMAT, _LOG_DATE_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    # stdout carries the ranked tables
    console = logging.StreamHandler(sys.stderr)
    logger.addHandler(_configure(console, formatter, level))

    try:
        log_file = _log_file_path(name, log_dir)
        logger.addHandler(
            _configure(logging.FileHandler(log_file, encoding="utf-8"), formatter, level)
        )
    except OSError as e:
        print(f"Warning: Could not create log file: {e}", file=sys.stderr)

    _LOGGERS_CACHE[name] = logger
    return logger


def _resolve_level(level: int | str) -> int:
    """Convert a level name to its numeric value.

    Raises:
        ValueError: If the name is not a known logging level.
    """
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    return numeric


def _configure(
    handler: logging.Handler,
    formatter: logging.Formatter,
    level: int,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _log_file_path(name: str, log_dir: Path) -> Path:
    """Return ``<log_dir>/<name>_<YYYYMMDD>.log``, creating the directory."""
    log_dir.mkdir(parents=True, exist_ok=True)
    safe_name = name.replace(".", "_").replace("/", "_")
    return log_dir / f"{safe_name}_{datetime.now():%Y%m%d}.log"
