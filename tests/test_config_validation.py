from dataclasses import replace
from pathlib import Path

import pytest

from app.dashboard_export import config
from app.dashboard_export.config import ScraperConfig
from app.dashboard_export.config_validation import validate_runtime_config


def _cfg(tmp_path: Path, **overrides) -> ScraperConfig:
    base = ScraperConfig(
        target_urls=("https://chartink.com/dashboard/1",),
        output_root=tmp_path / "out",
        staging_root=tmp_path / "staging",
    )
    return replace(base, **overrides)


def test_valid_config_is_returned(tmp_path):
    cfg = _cfg(tmp_path)
    assert validate_runtime_config("tests", cfg) is cfg


def test_from_env_uses_module_constants(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "TARGET_URLS", ("https://example.test/d",))
    monkeypatch.setattr(config, "CDP_ENDPOINT", "")

    cfg = validate_runtime_config("cli")

    assert cfg.target_urls == ("https://example.test/d",)
    assert cfg.cdp_endpoint is None
    assert cfg.output_root == (tmp_path / "data" / "chartink_data").absolute()


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"target_urls": ()}, "target URL"),
        ({"browser_backend": "lynx"}, "backend"),
        ({"settle_delay_seconds": -1.0}, "Settle delay"),
        ({"download_deadline_seconds": 0.0}, "download_deadline_seconds"),
        ({"poll_interval_seconds": -0.5}, "poll_interval_seconds"),
        ({"nav_timeout_seconds": 0.0}, "nav_timeout_seconds"),
        ({"nav_backoff_seconds": (2.0, -1.0)}, "backoff"),
    ],
)
def test_blocking_misconfiguration(tmp_path, overrides, fragment):
    with pytest.raises(ValueError) as excinfo:
        validate_runtime_config("tests", _cfg(tmp_path, **overrides))
    assert fragment in str(excinfo.value)


@pytest.mark.parametrize("staging", ["out", "out/tmp"])
def test_staging_inside_output_is_rejected(tmp_path, staging):
    with pytest.raises(ValueError):
        validate_runtime_config("tests", _cfg(tmp_path, staging_root=tmp_path / staging))


def test_output_inside_staging_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        validate_runtime_config(
            "tests", _cfg(tmp_path, output_root=tmp_path / "staging" / "out")
        )
