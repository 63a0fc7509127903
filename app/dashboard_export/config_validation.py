from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from . import config
from .config import ScraperConfig
from .logging_utils import _scraper_event
from .utils import log_line

Entrypoint = Literal["ui", "cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def _is_within(child: Path, parent: Path) -> bool:
    child = Path(child).absolute()
    parent = Path(parent).absolute()
    return child == parent or parent in child.parents


def validate_runtime_config(
    entrypoint: Entrypoint, cfg: Optional[ScraperConfig] = None
) -> ScraperConfig:
    """Validate the scrape configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected and
    returns the validated config otherwise.
    """

    cfg = cfg or ScraperConfig.from_env()

    if not cfg.target_urls:
        _raise_config_error(
            "At least one target URL is required.",
            entrypoint=entrypoint,
            error="no_target_urls",
        )

    if cfg.browser_backend not in config.BROWSER_BACKENDS:
        _raise_config_error(
            f"Unknown browser backend {cfg.browser_backend!r}.",
            entrypoint=entrypoint,
            error="unknown_browser_backend",
        )

    if cfg.settle_delay_seconds < 0:
        _raise_config_error(
            "Settle delay must be non-negative.",
            entrypoint=entrypoint,
            error="invalid_settle_delay",
        )

    timeout_fields = [
        ("download_deadline_seconds", cfg.download_deadline_seconds),
        ("poll_interval_seconds", cfg.poll_interval_seconds),
        ("nav_timeout_seconds", cfg.nav_timeout_seconds),
    ]
    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )

    if any(delay < 0 for delay in cfg.nav_backoff_seconds):
        _raise_config_error(
            "Navigation backoff delays must be non-negative.",
            entrypoint=entrypoint,
            error="invalid_backoff",
        )

    # The staging directory is wiped at run start and end.
    if _is_within(cfg.output_root, cfg.staging_root) or _is_within(cfg.staging_root, cfg.output_root):
        _raise_config_error(
            "Staging root and output root must not contain one another.",
            entrypoint=entrypoint,
            error="overlapping_roots",
        )

    return cfg


__all__ = ["validate_runtime_config", "Entrypoint"]
