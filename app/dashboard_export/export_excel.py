"""Excel export helpers for run telemetry."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import pandas as pd

from . import config
from .telemetry import load_run, prune_old_exports


def export_latest_run_to_excel(dest_path: Optional[str] = None) -> str:
    """Create an Excel workbook from the most recent telemetry payload."""

    payload = load_run()
    if payload is None:
        raise FileNotFoundError("No run telemetry available to export")

    df = pd.DataFrame(payload.get("entries", []))
    if df.empty:
        df = pd.DataFrame([{"status": "none", "info": "No entries in latest run"}])

    def by_status(status: str) -> pd.DataFrame:
        return df[df["status"] == status].copy()

    def safe_pivot(frame, by):
        if frame.empty or any(col not in frame.columns for col in by):
            return pd.DataFrame()
        return frame.groupby(by).size().reset_index(name="count").sort_values("count", ascending=False)

    summary_status = df.groupby("status").size().reset_index(name="count")
    summary_dashboard = safe_pivot(df, ["dashboard", "status"])

    os.makedirs(config.EXPORTS_DIR, exist_ok=True)
    if not dest_path:
        dest_path = str(Path(config.EXPORTS_DIR) / f"run_{payload['run_id']}.xlsx")

    with pd.ExcelWriter(dest_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="All")
        by_status("page_done").to_excel(writer, index=False, sheet_name="Pages")
        by_status("matched").to_excel(writer, index=False, sheet_name="Matched")
        by_status("unmatched").to_excel(writer, index=False, sheet_name="Unmatched")
        by_status("failed").to_excel(writer, index=False, sheet_name="Failed")
        summary_status.to_excel(writer, index=False, sheet_name="Summary_Status")
        if not summary_dashboard.empty:
            summary_dashboard.to_excel(writer, index=False, sheet_name="Summary_Dashboard")

    prune_old_exports()
    return dest_path


__all__ = ["export_latest_run_to_excel"]
