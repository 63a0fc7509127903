"""Run telemetry for scrape cycles."""

from __future__ import annotations

import json
import os
import time
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


class RunTelemetry:
    """Collect per-page and per-file outcomes for one run."""

    def __init__(self, trigger: str = "cli") -> None:
        self.run_id = f"{_ts()}_{uuid.uuid4().hex[:8]}"
        self.trigger = trigger
        self.started_at = time.time()
        self.entries: List[Dict[str, Any]] = []
        self.summary: Dict[str, Any] = defaultdict(int)

    def add(self, status: str, reason: str, meta: Dict[str, Any]) -> None:
        self.entries.append(
            {
                "status": status,
                "reason": reason,
                **meta,
            }
        )
        self.summary[f"count_{status}"] += 1

    def count(self, status: str) -> int:
        return int(self.summary.get(f"count_{status}", 0))

    def finalize(self, extra: Optional[Dict[str, Any]] = None) -> str:
        runs_dir = Path(config.RUNS_DIR)
        os.makedirs(runs_dir, exist_ok=True)
        payload = {
            "run_id": self.run_id,
            "trigger": self.trigger,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "summary": dict(self.summary),
            "entries": self.entries,
            **(extra or {}),
        }
        path = runs_dir / f"run_{self.run_id}.json"
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2, default=str)
        return str(path)


def list_run_files() -> List[str]:
    runs_dir = Path(config.RUNS_DIR)
    if not runs_dir.is_dir():
        return []
    return sorted(str(p) for p in runs_dir.glob("run_*.json"))


def load_run(run_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Load one run payload by id, or the most recent one when ``run_id`` is None."""

    if run_id is None:
        runs = list_run_files()
        if not runs:
            return None
        path = Path(runs[-1])
    else:
        path = Path(config.RUNS_DIR) / f"run_{run_id}.json"
        if not path.exists():
            return None
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def prune_old_exports() -> None:
    exports_dir = Path(config.EXPORTS_DIR)
    files = sorted(str(p) for p in exports_dir.glob("*.xlsx"))
    while len(files) > config.MAX_EXPORTS:
        old = files.pop(0)
        try:
            os.remove(old)
        except OSError:
            continue


__all__ = [
    "RunTelemetry",
    "list_run_files",
    "load_run",
    "prune_old_exports",
]
