from __future__ import annotations

from pathlib import Path

import pytest

from app.dashboard_export import config, utils


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every data path at ``tmp_path`` and log into it."""

    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config, "LOG_DIR", data_dir / "logs")
    monkeypatch.setattr(config, "LOG_FILE", data_dir / "logs" / "latest.log")
    monkeypatch.setattr(config, "RUNS_DIR", data_dir / "runs")
    monkeypatch.setattr(config, "EXPORTS_DIR", data_dir / "exports")
    monkeypatch.setattr(config, "OUTPUT_ROOT", data_dir / "chartink_data")
    monkeypatch.setattr(config, "STAGING_ROOT", data_dir / "chartink_tmp_downloads")
    monkeypatch.setattr(config, "CDP_ENDPOINT", "")

    utils._configure_logger(data_dir / "logs" / "latest.log")
    return data_dir


@pytest.fixture
def event_recorder(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict]]:
    """Capture ``_scraper_event`` calls made by any module in the package."""

    from app.dashboard_export import (
        download_trigger,
        download_watcher,
        file_router,
        retry_policy,
        run,
        schema_snapshot,
    )

    events: list[tuple[str, dict]] = []

    def _record(label: str = "", **fields: object) -> None:
        events.append((label, fields))

    for module in (download_trigger, download_watcher, file_router, retry_policy, run, schema_snapshot):
        monkeypatch.setattr(module, "_scraper_event", _record)
    return events
