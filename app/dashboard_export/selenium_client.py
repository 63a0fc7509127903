"""Selenium-backed browser session for dashboard pages."""
from __future__ import annotations

import urllib.parse
from pathlib import Path
from typing import Any, Dict, Optional

from selenium import webdriver
from selenium.common.exceptions import JavascriptException, TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.remote.webdriver import WebDriver

from . import config
from .browser import BrowserSession, download_behavior_params
from .errors import BrowserConnectionError, NavigationError
from .logging_utils import _scraper_event
from .scripts import EvalResult, ScriptTemplate
from .utils import log_line


def debugger_address(endpoint: Optional[str]) -> Optional[str]:
    """Return ``host:port`` for Chrome's ``debuggerAddress`` option.

    Accepts either a bare address or a URL such as ``http://127.0.0.1:9222``.
    """

    if not endpoint:
        return None
    if "://" not in endpoint:
        return endpoint
    parsed = urllib.parse.urlparse(endpoint)
    return parsed.netloc or None


def make_driver(*, headless: bool = True, attach_to: Optional[str] = None) -> WebDriver:
    """Instantiate a Chrome WebDriver, attached to a running Chrome if requested."""

    chrome_options = Options()
    address = debugger_address(attach_to)
    if address:
        chrome_options.add_experimental_option("debuggerAddress", address)
    else:
        chrome_options.binary_location = config.CHROME_BINARY
        if headless:
            chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--window-size=1920,1080")
    return webdriver.Chrome(options=chrome_options)


class SeleniumSession(BrowserSession):
    def __init__(
        self,
        *,
        debugger_address: Optional[str] = None,
        headless: bool = True,
        nav_timeout_seconds: float = 45.0,
    ) -> None:
        self.debugger_address = debugger_address
        self.headless = headless
        self.nav_timeout_seconds = nav_timeout_seconds
        self._driver: Optional[WebDriver] = None

    @property
    def driver(self) -> WebDriver:
        if self._driver is None:
            raise BrowserConnectionError("Browser session is not open")
        return self._driver

    def open(self) -> None:
        _scraper_event("connect", backend="selenium", cdp_endpoint=self.debugger_address)
        try:
            self._driver = make_driver(headless=self.headless, attach_to=self.debugger_address)
            self._driver.set_page_load_timeout(self.nav_timeout_seconds)
        except WebDriverException as exc:
            raise BrowserConnectionError(f"Unable to start WebDriver: {exc}") from exc
        log_line("Browser session opened")

    def navigate(self, url: str) -> None:
        try:
            self.driver.get(url)
        except TimeoutException as exc:
            raise NavigationError(f"get({url!r}) timed out: {exc.msg}") from exc
        except WebDriverException as exc:
            raise NavigationError(f"get({url!r}) failed: {exc.msg}") from exc

    def evaluate(self, template: ScriptTemplate, params: Optional[Dict[str, Any]] = None) -> EvalResult:
        try:
            value = self.driver.execute_script(template.selenium_source(), params or {})
        except (JavascriptException, WebDriverException) as exc:
            return EvalResult.failed(f"{template.label}: {exc.msg}")
        return EvalResult.of(value)

    def redirect_downloads(self, directory: Path) -> None:
        try:
            self.driver.execute_cdp_cmd("Browser.setDownloadBehavior", download_behavior_params(directory))
        except WebDriverException as exc:
            raise BrowserConnectionError(f"Unable to redirect downloads: {exc.msg}") from exc
        log_line(f"Downloads redirected to {directory}")

    def close(self) -> None:
        if self._driver is None:
            return
        try:
            self._driver.quit()
        except WebDriverException as exc:
            log_line(f"Error closing WebDriver: {exc.msg}")
        self._driver = None


__all__ = ["SeleniumSession", "make_driver", "debugger_address"]
