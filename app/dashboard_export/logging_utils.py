from __future__ import annotations

import logging
from typing import Any

from .utils import log_line

_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
}


def _scraper_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Emit a structured scraper log line.

    ``phase`` may be used as a keyword alias for the label. When both
    ``label`` and ``phase`` are provided, ``phase`` is emitted as part of the
    payload so the caller still captures the event stage. ``error`` events are
    logged at ERROR and ``warn`` events at WARNING.
    """

    try:
        phase_label = label or (phase or "")
        if phase and label:
            fields.setdefault("phase", phase)
        payload = ", ".join(f"{k}={repr(v)}" for k, v in sorted(fields.items()))
        log_line(f"[SCRAPER][{phase_label.upper()}] {payload}", _LEVELS.get(label, logging.INFO))
    except Exception:
        # Never let logging break the scraper.
        return


__all__ = ["_scraper_event"]
