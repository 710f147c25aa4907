"""Logging setup for jiq.

The terminal belongs to the TUI, so records go to a size-rotated file and a
stderr handler is only attached on request. ``JIQ_LOG_DIR`` and
``JIQ_LOG_LEVEL`` override the defaults.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

__all__ = ["setup_logging", "get_log_path", "resolve_log_dir"]

LOG_FILENAME = "jiq.log"
_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"
# Per-chunk request logging from the HTTP stack drowns out the worker's own records.
_QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")
_LOG_PATH: Path | None = None


def setup_logging(
    level: int | None = None,
    *,
    log_dir: Path | str | None = None,
    console: bool = False,
    max_bytes: int = 512_000,
    backup_count: int = 2,
    force: bool = False,
) -> Path:
    """Install the jiq handlers on the root logger and return the log file path.

    Repeated calls are no-ops unless ``force`` is set. When ``level`` is
    omitted it comes from ``JIQ_LOG_LEVEL`` (default ``INFO``).
    """

    global _LOG_PATH
    if _LOG_PATH is not None and not force:
        return _LOG_PATH

    resolved_level = _resolve_level(level)
    log_path = resolve_log_dir(log_dir) / LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=resolved_level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))

    _LOG_PATH = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the active log file, or None before :func:`setup_logging` ran."""

    return _LOG_PATH


def resolve_log_dir(log_dir: Path | str | None = None) -> Path:
    if log_dir is None:
        log_dir = os.environ.get("JIQ_LOG_DIR") or _default_log_dir()
    return Path(log_dir).expanduser()


def _default_log_dir() -> Path:
    state_home = os.environ.get("XDG_STATE_HOME")
    base = Path(state_home) if state_home else Path.home() / ".local" / "state"
    return base / "jiq"


def _resolve_level(level: int | None) -> int:
    if level is not None:
        return level
    name = os.environ.get("JIQ_LOG_LEVEL", "").strip().upper()
    if not name:
        return logging.INFO
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO
