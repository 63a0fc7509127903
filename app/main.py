from __future__ import annotations

import os
import threading
from typing import Any, Dict

from flask import Flask, Response, jsonify, send_file

from app.dashboard_export import telemetry
from app.dashboard_export.config_validation import validate_runtime_config
from app.dashboard_export.export_excel import export_latest_run_to_excel
from app.dashboard_export.healthcheck import run_health_checks
from app.dashboard_export.run import run_scrape
from app.dashboard_export.utils import ensure_dirs, log_line

app = Flask(__name__)

# Directories are created on import so WSGI entrypoints find them ready.
ensure_dirs()

# Only one scrape may own the staging directory at a time.
_RUN_LOCK = threading.Lock()


def _run_in_background() -> None:
    try:
        summary = run_scrape(trigger="ui")
        app.config["LAST_SUMMARY"] = summary
    except Exception as exc:  # noqa: BLE001
        log_line(f"Scrape thread failed: {exc}")
    finally:
        _RUN_LOCK.release()


@app.get("/api/health")
def api_health() -> Response:
    """Return a JSON health summary for configuration, filesystem, and browser."""

    result = run_health_checks(entrypoint="ui")
    status = 200 if result.ok else 503
    return jsonify({"ok": result.ok, "checks": result.checks}), status


@app.post("/api/scrape")
def start_scrape() -> Response:
    """Start a scrape cycle in a background thread."""

    try:
        validate_runtime_config("ui")
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400

    if not _RUN_LOCK.acquire(blocking=False):
        return jsonify({"ok": False, "error": "a scrape is already running"}), 409

    threading.Thread(target=_run_in_background, daemon=True).start()
    return jsonify({"ok": True, "started": True}), 202


@app.get("/api/runs/latest")
def api_runs_latest() -> Response:
    """Return the latest run summary from run telemetry."""

    payload = telemetry.load_run()
    if payload is None:
        return jsonify({"ok": False, "error": "no runs"}), 404

    run: Dict[str, Any] = {
        "id": payload["run_id"],
        "trigger": payload.get("trigger"),
        "status": payload.get("status"),
        "error": payload.get("error"),
        "started_at": payload.get("started_at"),
        "ended_at": payload.get("ended_at"),
        "summary": payload.get("summary", {}),
        "pages": payload.get("pages", []),
    }
    return jsonify({"ok": True, "run": run})


@app.get("/api/exports/latest.xlsx")
def api_export_latest_xlsx() -> Response:
    try:
        path = export_latest_run_to_excel()
    except FileNotFoundError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 404
    return send_file(path, as_attachment=True, download_name=os.path.basename(path))


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8080)
