"""Configuration constants for the dashboard export scraper."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DATA_DIR: Path = Path(os.getenv("DASHBOARD_DATA_DIR", "/app/data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
RUNS_DIR: Path = DATA_DIR / "runs"
EXPORTS_DIR: Path = DATA_DIR / "exports"
MAX_EXPORTS: int = int(os.getenv("DASHBOARD_EXPORTS_KEEP_MAX", "5"))

OUTPUT_ROOT: Path = Path(os.getenv("DASHBOARD_OUTPUT_ROOT", str(DATA_DIR / "chartink_data")))
STAGING_ROOT: Path = Path(
    os.getenv("DASHBOARD_STAGING_ROOT", str(DATA_DIR / "chartink_tmp_downloads"))
)

DEFAULT_TARGET_URLS: Tuple[str, ...] = (
    "https://chartink.com/dashboard/208896",  # Stocks/Sectors
    "https://chartink.com/dashboard/419640",  # Market Condition
)


def _parse_url_list(raw: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    """Split a comma separated URL list, ignoring blanks."""

    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_delays(raw: Optional[str], default: Tuple[float, ...]) -> Tuple[float, ...]:
    if not raw:
        return default
    try:
        return tuple(float(part) for part in raw.split(",") if part.strip())
    except ValueError:
        return default


def _parse_timeout_seconds(env_var: str, default: float, *, minimum: float = 0.1) -> float:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = float(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


def _parse_flag(env_var: str, default: str) -> bool:
    return os.getenv(env_var, default).strip().lower() not in {"0", "false", "no", ""}


TARGET_URLS: Tuple[str, ...] = _parse_url_list(
    os.getenv("DASHBOARD_TARGET_URLS"), DEFAULT_TARGET_URLS
)

# Fixed pause after navigation so client-side rendering can finish.
SETTLE_DELAY_SECONDS: float = float(os.getenv("DASHBOARD_SETTLE_DELAY_SECONDS", "8"))
# Maximum time the watcher waits for exports to land, per page.
DOWNLOAD_TIMEOUT_SECONDS: float = _parse_timeout_seconds("DASHBOARD_DOWNLOAD_TIMEOUT_SECONDS", 30)
POLL_INTERVAL_SECONDS: float = _parse_timeout_seconds(
    "DASHBOARD_POLL_INTERVAL_SECONDS", 0.5, minimum=0.05
)
NAV_BACKOFF_SECONDS: Tuple[float, ...] = _parse_delays(
    os.getenv("DASHBOARD_NAV_BACKOFF_SECONDS"), (2.0, 5.0, 10.0)
)
NAV_TIMEOUT_SECONDS: float = _parse_timeout_seconds("DASHBOARD_NAV_TIMEOUT_SECONDS", 45)

# Remote debugging endpoint of an already running Chrome. Empty launches one.
CDP_ENDPOINT: str = os.getenv("DASHBOARD_CDP_ENDPOINT", "http://127.0.0.1:9222").strip()
BROWSER_BACKEND: str = os.getenv("DASHBOARD_BROWSER_BACKEND", "playwright").strip().lower()
BROWSER_BACKENDS: Tuple[str, ...] = ("playwright", "selenium")
HEADLESS: bool = _parse_flag("DASHBOARD_HEADLESS", "true")
CHROME_BINARY: str = os.getenv("DASHBOARD_CHROME_BINARY", "/usr/bin/chromium")

# By default a page that cannot be navigated or snapshotted aborts the run;
# when set, the page is recorded as failed and the run moves on.
ISOLATE_PAGE_FAILURES: bool = _parse_flag("DASHBOARD_ISOLATE_PAGE_FAILURES", "false")

MIN_FREE_MB: int = int(os.getenv("DASHBOARD_MIN_FREE_MB", "100"))
HEALTH_PROBE_TIMEOUT_SECONDS: float = _parse_timeout_seconds(
    "DASHBOARD_HEALTH_PROBE_TIMEOUT_SECONDS", 5
)

ACCEPTED_EXTENSIONS: Tuple[str, ...] = (".csv", ".xlsx")
PENDING_SUFFIXES: Tuple[str, ...] = (".crdownload", ".tmp")
TITLE_SUFFIXES: Tuple[str, ...] = (" - Chartink.com", " - Chartink")
WIDGET_NAME_MAX_LENGTH: int = 50


@dataclass(frozen=True)
class ScraperConfig:
    """Immutable settings for one scrape cycle."""

    target_urls: Tuple[str, ...] = DEFAULT_TARGET_URLS
    output_root: Path = OUTPUT_ROOT
    staging_root: Path = STAGING_ROOT
    settle_delay_seconds: float = 8.0
    download_deadline_seconds: float = 30.0
    poll_interval_seconds: float = 0.5
    nav_backoff_seconds: Tuple[float, ...] = (2.0, 5.0, 10.0)
    nav_timeout_seconds: float = 45.0
    cdp_endpoint: Optional[str] = None
    browser_backend: str = "playwright"
    headless: bool = True
    isolate_page_failures: bool = False
    accepted_extensions: Tuple[str, ...] = ACCEPTED_EXTENSIONS
    pending_suffixes: Tuple[str, ...] = PENDING_SUFFIXES
    title_suffixes: Tuple[str, ...] = TITLE_SUFFIXES

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """Build a config from the module constants (read at call time)."""

        return cls(
            target_urls=tuple(TARGET_URLS),
            output_root=Path(OUTPUT_ROOT).absolute(),
            staging_root=Path(STAGING_ROOT).absolute(),
            settle_delay_seconds=SETTLE_DELAY_SECONDS,
            download_deadline_seconds=DOWNLOAD_TIMEOUT_SECONDS,
            poll_interval_seconds=POLL_INTERVAL_SECONDS,
            nav_backoff_seconds=tuple(NAV_BACKOFF_SECONDS),
            nav_timeout_seconds=NAV_TIMEOUT_SECONDS,
            cdp_endpoint=CDP_ENDPOINT or None,
            browser_backend=BROWSER_BACKEND,
            headless=HEADLESS,
            isolate_page_failures=ISOLATE_PAGE_FAILURES,
        )


__all__ = ["ScraperConfig"]
