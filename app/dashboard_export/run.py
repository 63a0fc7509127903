"""Scrape cycle over Chartink-style dashboards.

Workflow, per target page, with one browser session for the whole run:

- Navigate (bounded retry), then wait a fixed settle delay for rendering.
- Read the page title into a dashboard name.
- Snapshot ``signature -> widget`` from the table headers on the page.
- Click every export control and wait for the downloads to settle.
- Route each staged file by recomputing its header signature.

The staging directory is emptied before the run and removed afterwards, on
success and on failure.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .browser import BrowserSession, make_session
from .config import ScraperConfig
from .config_validation import validate_runtime_config
from .download_trigger import trigger_exports
from .download_watcher import count_entries, wait_for_downloads
from .errors import ExtractionError, NavigationError, ScraperError
from .file_router import route_downloads
from .logging_utils import _scraper_event
from .retry_policy import RetryPolicy
from .schema_snapshot import extract_schema_map, get_dashboard_name
from .selectors_dashboard import DASHBOARD_SELECTORS, DashboardSelectors
from .telemetry import RunTelemetry
from .utils import LOGGER, ensure_dirs, log_line, remove_dir, reset_dir, setup_run_logger

SessionFactory = Callable[[ScraperConfig], BrowserSession]

PAGE_DONE = "page_done"
PAGE_SKIPPED = "page_skipped"
PAGE_FAILED = "page_failed"

# Page-level failures that ``isolate_page_failures`` may contain.
PAGE_ERRORS = (NavigationError, ExtractionError)


def _short_error_message(exc: BaseException, max_length: int = 200) -> str:
    message = f"{type(exc).__name__}: {exc}"
    return message if len(message) <= max_length else message[: max_length - 3] + "..."


def process_dashboard(
    session: BrowserSession,
    url: str,
    cfg: ScraperConfig,
    *,
    nav_policy: RetryPolicy,
    telemetry: RunTelemetry,
    selectors: DashboardSelectors = DASHBOARD_SELECTORS,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """Run navigate -> settle -> snapshot -> trigger -> watch -> route for one page."""

    _scraper_event("nav", url=url)
    nav_policy.call(lambda: session.navigate(url), label=url)

    _scraper_event("settle", url=url, seconds=cfg.settle_delay_seconds)
    sleep(cfg.settle_delay_seconds)

    dashboard = get_dashboard_name(session, cfg.title_suffixes)
    log_line(f"Identified dashboard: {dashboard}")

    # Must precede the trigger: clicking exports can change the DOM.
    schema_map = extract_schema_map(session, selectors)
    baseline = count_entries(cfg.staging_root)

    expected = trigger_exports(session, selectors)
    if expected == 0:
        log_line(f"No download buttons found on {url}", logging.WARNING)
        _scraper_event("warn", phase="trigger", kind="no_export_controls", url=url, dashboard=dashboard)
        telemetry.add(PAGE_SKIPPED, "no_export_controls", {"url": url, "dashboard": dashboard})
        return {"url": url, "dashboard": dashboard, "status": PAGE_SKIPPED}

    settled = wait_for_downloads(
        cfg.staging_root,
        baseline,
        expected,
        cfg.download_deadline_seconds,
        poll_interval=cfg.poll_interval_seconds,
        pending_suffixes=cfg.pending_suffixes,
    )
    report = route_downloads(
        cfg.staging_root,
        schema_map,
        dashboard,
        cfg.output_root,
        accepted_extensions=cfg.accepted_extensions,
        telemetry=telemetry,
    )
    telemetry.add(
        PAGE_DONE,
        "" if settled else "download_timeout",
        {
            "url": url,
            "dashboard": dashboard,
            "expected": expected,
            "settled": settled,
            "matched": len(report.matched),
            "unmatched": len(report.unmatched),
            "failed": len(report.failed),
        },
    )
    return {
        "url": url,
        "dashboard": dashboard,
        "status": PAGE_DONE,
        "settled": settled,
        "matched": len(report.matched),
        "unmatched": len(report.unmatched),
        "failed": len(report.failed),
    }


def run_scrape(
    cfg: Optional[ScraperConfig] = None,
    *,
    session_factory: SessionFactory = make_session,
    trigger: str = "cli",
    sleep: Callable[[float], None] = time.sleep,
    selectors: DashboardSelectors = DASHBOARD_SELECTORS,
) -> Dict[str, Any]:
    """Run one full scrape cycle over ``cfg.target_urls``.

    Returns a summary dict. Unrecovered errors are logged, recorded in run
    telemetry and re-raised after the staging directory has been removed.
    """

    cfg = validate_runtime_config(trigger, cfg)
    ensure_dirs()
    log_path = setup_run_logger()
    telemetry = RunTelemetry(trigger=trigger)
    nav_policy = RetryPolicy(
        delays=tuple(cfg.nav_backoff_seconds), retry_on=(NavigationError,), sleep=sleep
    )

    reset_dir(cfg.staging_root)
    cfg.output_root.mkdir(parents=True, exist_ok=True)

    pages: List[Dict[str, Any]] = []
    status = "failed"
    error: Optional[str] = None
    _scraper_event("run", step="start", run_id=telemetry.run_id, targets=len(cfg.target_urls))
    try:
        with session_factory(cfg) as session:
            session.redirect_downloads(cfg.staging_root)
            for url in cfg.target_urls:
                try:
                    pages.append(
                        process_dashboard(
                            session,
                            url,
                            cfg,
                            nav_policy=nav_policy,
                            telemetry=telemetry,
                            selectors=selectors,
                            sleep=sleep,
                        )
                    )
                except PAGE_ERRORS as exc:
                    if not cfg.isolate_page_failures:
                        raise
                    _scraper_event(
                        "error",
                        phase="page",
                        url=url,
                        error_code=exc.error_code,
                        error=_short_error_message(exc),
                    )
                    telemetry.add(PAGE_FAILED, exc.error_code, {"url": url, "error": str(exc)})
                    pages.append({"url": url, "status": PAGE_FAILED, "error": str(exc)})
        status = "completed"
        log_line(f"Scrape cycle complete. Data stored in: {cfg.output_root}")
    except Exception as exc:
        error = _short_error_message(exc)
        _scraper_event(
            "error",
            phase="run",
            run_id=telemetry.run_id,
            error_code=getattr(exc, "error_code", None),
            error=error,
        )
        if not isinstance(exc, ScraperError):
            LOGGER.exception("Pipeline crash")
        raise
    finally:
        remove_dir(cfg.staging_root)
        _scraper_event("cleanup", staging_root=str(cfg.staging_root))
        summary = {
            "run_id": telemetry.run_id,
            "status": status,
            "error": error,
            "pages": pages,
            "matched": telemetry.count("matched"),
            "unmatched": telemetry.count("unmatched"),
            "failed": telemetry.count("failed"),
            "timeouts": sum(1 for page in pages if page.get("settled") is False),
            "output_root": str(cfg.output_root),
            "log_file": str(log_path),
        }
        summary["telemetry_file"] = telemetry.finalize(
            {"status": status, "error": error, "pages": pages}
        )
    return summary


def _cli_entrypoint(argv: Optional[List[str]] = None) -> None:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Export dashboard tables into per-dashboard folders")
    parser.parse_args(argv)
    run_scrape(trigger="cli")


if __name__ == "__main__":  # pragma: no cover
    _cli_entrypoint()

__all__ = ["run_scrape", "process_dashboard", "_cli_entrypoint"]
