from __future__ import annotations

import pytest

from app.dashboard_export.utils import sanitize_dashboard_name, sanitize_widget_name


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Foo/Bar! - Chartink.com", "Foo_Bar"),
        ("Market Condition - Chartink", "Market_Condition"),
        ("Stocks  -  Sectors - Chartink.com", "Stocks_-_Sectors"),
        ("  spaced   out  ", "spaced_out"),
        ("snake_case-name", "snake_case-name"),
        ("!!! - Chartink.com", "Dashboard_Unknown"),
        ("Foo - Chartink.com ", "Foo"),
        ("\tMarket Condition - Chartink\n", "Market_Condition"),
        (None, "Unknown_Dashboard"),
        ("", "Unknown_Dashboard"),
    ],
)
def test_sanitize_dashboard_name(title, expected: str) -> None:
    assert sanitize_dashboard_name(title) == expected


def test_sanitize_dashboard_name_custom_suffixes() -> None:
    assert sanitize_dashboard_name("Flows | Acme", suffixes=(" | Acme",)) == "Flows"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Top Gainers", "Top_Gainers"),
        ("  Top Gainers  ", "Top_Gainers"),
        ("52-wk High (NSE)", "52_wk_High__NSE_"),
        (None, "Unknown_Widget"),
        ("   ", "Unknown_Widget"),
    ],
)
def test_sanitize_widget_name(raw, expected: str) -> None:
    assert sanitize_widget_name(raw) == expected


def test_sanitize_widget_name_is_bounded() -> None:
    assert sanitize_widget_name("x" * 80) == "x" * 50
    assert len(sanitize_widget_name("word " * 30, max_length=20)) == 20
