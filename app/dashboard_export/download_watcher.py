"""Polling wait for the browser's download manager to finish writing files."""
from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Iterable

from . import config
from .error_codes import ErrorCode
from .logging_utils import _scraper_event


def count_entries(directory: Path) -> int:
    """Number of entries currently in ``directory`` (0 if it is missing)."""

    try:
        return sum(1 for _ in Path(directory).iterdir())
    except FileNotFoundError:
        return 0


def has_pending_transfers(
    directory: Path, pending_suffixes: Iterable[str] = config.PENDING_SUFFIXES
) -> bool:
    """True while any entry still carries a transfer-in-progress suffix."""

    suffixes = tuple(pending_suffixes)
    try:
        return any(entry.name.endswith(suffixes) for entry in Path(directory).iterdir())
    except FileNotFoundError:
        return False


def wait_for_downloads(
    directory: Path,
    baseline: int,
    expected_new: int,
    deadline_seconds: float,
    *,
    poll_interval: float = config.POLL_INTERVAL_SECONDS,
    pending_suffixes: Iterable[str] = config.PENDING_SUFFIXES,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Block until the expected files have settled or the deadline passes.

    Settled means no entry carries a pending suffix and the directory holds at
    least ``baseline + expected_new`` entries. Returns ``False`` on timeout;
    the caller proceeds with whatever has arrived.
    """

    suffixes = tuple(pending_suffixes)
    target = baseline + expected_new
    _scraper_event("watch", step="start", expected_new=expected_new, baseline=baseline)

    started = clock()
    while clock() - started < deadline_seconds:
        present = count_entries(directory)
        if not has_pending_transfers(directory, suffixes) and present >= target:
            _scraper_event(
                "watch",
                step="settled",
                present=present,
                elapsed=round(clock() - started, 3),
            )
            return True
        sleep(poll_interval)

    _scraper_event(
        "warn",
        phase="watch",
        kind=ErrorCode.DOWNLOAD_TIMEOUT,
        present=count_entries(directory),
        expected=target,
        pending=has_pending_transfers(directory, suffixes),
        deadline_seconds=deadline_seconds,
    )
    return False


__all__ = ["count_entries", "has_pending_transfers", "wait_for_downloads"]
