"""Explicit browser session handles used by the orchestrator.

A session is opened once per run, reused for every target page and closed in
the run's cleanup path. Script evaluation is synchronous and always returns an
:class:`~app.dashboard_export.scripts.EvalResult`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PWError,
    Page,
    Playwright,
    TimeoutError as PWTimeout,
    sync_playwright,
)

from .config import ScraperConfig
from .errors import BrowserConnectionError, NavigationError
from .logging_utils import _scraper_event
from .scripts import EvalResult, ScriptTemplate
from .utils import log_line

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--window-size=1920,1080",
]


def download_behavior_params(directory: Path) -> Dict[str, Any]:
    """Parameters for the CDP ``Browser.setDownloadBehavior`` command."""

    return {
        "behavior": "allow",
        "downloadPath": str(Path(directory).absolute()),
        "eventsEnabled": True,
    }


class BrowserSession:
    """Interface consumed by the scrape pipeline."""

    def open(self) -> None:
        raise NotImplementedError

    def navigate(self, url: str) -> None:
        raise NotImplementedError

    def evaluate(self, template: ScriptTemplate, params: Optional[Dict[str, Any]] = None) -> EvalResult:
        raise NotImplementedError

    def redirect_downloads(self, directory: Path) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "BrowserSession":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class PlaywrightSession(BrowserSession):
    """Playwright-backed session, attached over CDP or launching Chromium."""

    def __init__(
        self,
        *,
        cdp_endpoint: Optional[str] = None,
        headless: bool = True,
        nav_timeout_seconds: float = 45.0,
    ) -> None:
        self.cdp_endpoint = cdp_endpoint
        self.headless = headless
        self.nav_timeout_ms = int(nav_timeout_seconds * 1000)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise BrowserConnectionError("Browser session is not open")
        return self._page

    def open(self) -> None:
        _scraper_event("connect", backend="playwright", cdp_endpoint=self.cdp_endpoint)
        try:
            self._playwright = sync_playwright().start()
            chromium = self._playwright.chromium
            if self.cdp_endpoint:
                self._browser = chromium.connect_over_cdp(self.cdp_endpoint)
                contexts = self._browser.contexts
                if not contexts:
                    raise BrowserConnectionError(
                        f"Browser at {self.cdp_endpoint} exposes no default context"
                    )
                self._context = contexts[0]
            else:
                # Must be the default context for setDownloadBehavior to reach it.
                # An empty user_data_dir is a throwaway profile.
                self._context = chromium.launch_persistent_context(
                    "", headless=self.headless, args=LAUNCH_ARGS, accept_downloads=True
                )
            pages = self._context.pages
            self._page = pages[0] if pages else self._context.new_page()
        except BrowserConnectionError:
            self.close()
            raise
        except PWError as exc:
            self.close()
            raise BrowserConnectionError(f"Unable to connect to browser: {exc}") from exc
        log_line("Browser session opened")

    def navigate(self, url: str) -> None:
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=self.nav_timeout_ms)
        except PWTimeout as exc:
            raise NavigationError(f"goto({url!r}) timed out: {exc}") from exc
        except PWError as exc:
            raise NavigationError(f"goto({url!r}) failed: {exc}") from exc

    def evaluate(self, template: ScriptTemplate, params: Optional[Dict[str, Any]] = None) -> EvalResult:
        try:
            value = self.page.evaluate(template.source, params or {})
        except PWError as exc:
            return EvalResult.failed(f"{template.label}: {exc}")
        return EvalResult.of(value)

    def redirect_downloads(self, directory: Path) -> None:
        try:
            cdp = self._context.new_cdp_session(self.page)
            cdp.send("Browser.setDownloadBehavior", download_behavior_params(directory))
        except PWError as exc:
            raise BrowserConnectionError(f"Unable to redirect downloads: {exc}") from exc
        log_line(f"Downloads redirected to {directory}")

    def close(self) -> None:
        # Attached browsers belong to the user; only disconnect from them.
        if self._browser is not None:
            try:
                self._browser.close()
            except PWError as exc:
                log_line(f"Error closing browser: {exc}")
        elif self._context is not None:
            try:
                self._context.close()
            except PWError as exc:
                log_line(f"Error closing browser context: {exc}")
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PWError as exc:
                log_line(f"Error stopping playwright: {exc}")
        self._browser = None
        self._context = None
        self._page = None
        self._playwright = None


def make_session(cfg: ScraperConfig) -> BrowserSession:
    """Return an unopened session for the configured backend."""

    if cfg.browser_backend == "selenium":
        from .selenium_client import SeleniumSession

        return SeleniumSession(
            debugger_address=cfg.cdp_endpoint,
            headless=cfg.headless,
            nav_timeout_seconds=cfg.nav_timeout_seconds,
        )
    return PlaywrightSession(
        cdp_endpoint=cfg.cdp_endpoint,
        headless=cfg.headless,
        nav_timeout_seconds=cfg.nav_timeout_seconds,
    )


__all__ = ["BrowserSession", "PlaywrightSession", "make_session", "download_behavior_params"]
