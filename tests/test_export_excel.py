from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from app.dashboard_export import config
from app.dashboard_export.export_excel import export_latest_run_to_excel
from app.dashboard_export.telemetry import RunTelemetry


def test_export_without_runs_raises() -> None:
    with pytest.raises(FileNotFoundError):
        export_latest_run_to_excel()


def test_export_writes_status_sheets() -> None:
    telemetry = RunTelemetry(trigger="tests")
    telemetry.add("matched", "", {"dashboard": "Stocks", "widget": "Top_Gainers", "file": "a.csv"})
    telemetry.add("failed", "file_processing_failure", {"dashboard": "Stocks", "file": "b.xlsx"})
    telemetry.add("page_done", "", {"url": "https://chartink.com/dashboard/1", "dashboard": "Stocks"})
    telemetry.finalize({"status": "completed"})

    path = Path(export_latest_run_to_excel())

    assert path.parent == Path(config.EXPORTS_DIR)
    sheets = pd.read_excel(path, sheet_name=None)
    assert {"All", "Pages", "Matched", "Unmatched", "Failed", "Summary_Status", "Summary_Dashboard"} <= set(sheets)
    assert sheets["Matched"]["widget"].tolist() == ["Top_Gainers"]
    assert sheets["Failed"]["file"].tolist() == ["b.xlsx"]
    assert len(sheets["All"]) == 3


def test_export_keeps_a_bounded_number_of_workbooks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "MAX_EXPORTS", 1)
    exports = Path(config.EXPORTS_DIR)
    exports.mkdir(parents=True)
    (exports / "run_00000000_000000_old.xlsx").write_bytes(b"")
    RunTelemetry(trigger="tests").finalize({"status": "completed"})

    path = export_latest_run_to_excel()

    assert [str(p) for p in exports.glob("*.xlsx")] == [path]
