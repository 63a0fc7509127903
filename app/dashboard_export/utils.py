from __future__ import annotations

import logging
import re
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable

from . import config

LOGGER = logging.getLogger("dashboard_export")
_LOGGER_INITIALISED = False

UNKNOWN_DASHBOARD_TITLE = "Unknown_Dashboard"
DASHBOARD_NAME_FALLBACK = "Dashboard_Unknown"
WIDGET_NAME_FALLBACK = "Unknown_Widget"

_DASHBOARD_DISALLOWED = re.compile(r"[^a-zA-Z0-9 \-_]")
_WIDGET_DISALLOWED = re.compile(r"[^a-zA-Z0-9]")


def _configure_logger(log_path: Path) -> None:
    """Configure the shared application logger to write to ``log_path``."""

    global _LOGGER_INITIALISED

    log_path.parent.mkdir(parents=True, exist_ok=True)

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)

    LOGGER.setLevel(logging.INFO)
    LOGGER.addHandler(stream_handler)
    LOGGER.addHandler(file_handler)
    LOGGER.propagate = False

    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    """Initialise the logger lazily using the default log file."""

    if _LOGGER_INITIALISED:
        return

    _configure_logger(config.LOG_FILE)


def setup_run_logger() -> Path:
    """Rotate to a fresh timestamped log file for the current run."""

    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    log_path = config.LOG_DIR / f"scrape_{timestamp}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def ensure_dirs() -> None:
    """Ensure that the application's expected directory structure exists."""

    config.DATA_DIR.mkdir(parents=True, exist_ok=True)
    config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    config.RUNS_DIR.mkdir(parents=True, exist_ok=True)


def log_line(message: str, level: int = logging.INFO) -> None:
    """Write a timestamped log line to stdout and the active log file."""

    _ensure_logger()
    LOGGER.log(level, message)


def sanitize_dashboard_name(raw_title: str | None, suffixes: Iterable[str] = config.TITLE_SUFFIXES) -> str:
    """Turn a page title into a folder-safe dashboard name.

    Known site suffixes are removed, characters outside letters, digits,
    space, hyphen and underscore become separators, and whitespace runs
    collapse to a single underscore.
    """

    title = (raw_title or "").strip() or UNKNOWN_DASHBOARD_TITLE
    for suffix in suffixes:
        if suffix and title.endswith(suffix):
            title = title[: -len(suffix)]

    cleaned = _DASHBOARD_DISALLOWED.sub(" ", title)
    cleaned = "_".join(cleaned.split())
    return cleaned or DASHBOARD_NAME_FALLBACK


def sanitize_widget_name(raw_name: str | None, max_length: int = config.WIDGET_NAME_MAX_LENGTH) -> str:
    """Return an alphanumeric/underscore widget name bounded to ``max_length``."""

    name = (raw_name or "").strip() or WIDGET_NAME_FALLBACK
    return _WIDGET_DISALLOWED.sub("_", name)[:max_length]


def reset_dir(path: Path) -> Path:
    """Remove ``path`` recursively and recreate it empty."""

    remove_dir(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_dir(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)


def disk_has_room(min_free_mb: int, path: Path) -> bool:
    """Return True when the filesystem holding ``path`` has ``min_free_mb`` free."""

    probe = Path(path)
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    try:
        usage = shutil.disk_usage(probe)
    except OSError:
        return False
    return usage.free >= max(0, min_free_mb) * 1024 * 1024


__all__ = [
    "ensure_dirs",
    "setup_run_logger",
    "log_line",
    "sanitize_dashboard_name",
    "sanitize_widget_name",
    "reset_dir",
    "remove_dir",
    "disk_has_room",
]
