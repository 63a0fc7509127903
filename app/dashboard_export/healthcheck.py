from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import requests

from . import config
from .config import ScraperConfig
from .config_validation import validate_runtime_config
from .logging_utils import _scraper_event
from .utils import disk_has_room, ensure_dirs, log_line


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def probe_cdp_endpoint(endpoint: str, *, timeout: float = config.HEALTH_PROBE_TIMEOUT_SECONDS) -> dict[str, Any]:
    """Ask Chrome's remote debugging endpoint for its version."""

    url = endpoint.rstrip("/") + "/json/version"
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        return {"ok": False, "endpoint": endpoint, "error": str(exc)}
    if response.status_code != 200:
        return {"ok": False, "endpoint": endpoint, "http_status": response.status_code}
    try:
        browser = response.json().get("Browser")
    except ValueError:
        browser = None
    return {"ok": True, "endpoint": endpoint, "browser": browser}


def run_health_checks(entrypoint: str = "cli", cfg: Optional[ScraperConfig] = None) -> HealthResult:
    checks: dict[str, dict[str, Any]] = {}
    cfg = cfg or ScraperConfig.from_env()

    try:
        validate_runtime_config(entrypoint or "cli", cfg)
        checks["config"] = {"ok": True, "targets": len(cfg.target_urls)}
    except ValueError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    ensure_dirs()
    fs_ok = disk_has_room(config.MIN_FREE_MB, cfg.output_root)
    checks["filesystem"] = {
        "ok": fs_ok,
        "output_root": str(cfg.output_root),
        "min_free_mb": config.MIN_FREE_MB,
    }

    if cfg.cdp_endpoint:
        checks["browser"] = probe_cdp_endpoint(cfg.cdp_endpoint)
    else:
        checks["browser"] = {"ok": True, "mode": "launch"}

    overall_ok = all(check.get("ok", False) for check in checks.values())

    _scraper_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )

    return HealthResult(ok=overall_ok, checks=checks)


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(entrypoint="cli")
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    raise SystemExit(0 if result.ok else 1)
