from __future__ import annotations

import pytest

from app.dashboard_export.errors import ExtractionError
from app.dashboard_export.schema_snapshot import extract_schema_map, get_dashboard_name, insert_widget
from app.dashboard_export.scripts import EvalResult
from tests.test_run import FakePage, FakeSession


def _session(page: FakePage) -> FakeSession:
    session = FakeSession({"u": page})
    session.navigate("u")
    return session


def test_extract_schema_map_sanitizes_names() -> None:
    page = FakePage(
        widgets=[
            ("Top Gainers (NSE)", ["Symbol", "Price"]),
            (None, ["Sector", "Advances"]),
        ]
    )

    assert extract_schema_map(_session(page)) == {
        "Symbol,Price": "Top_Gainers__NSE_",
        "Sector,Advances": "Unknown_Widget",
    }


def test_later_widget_wins_on_signature_collision(event_recorder) -> None:
    page = FakePage(
        widgets=[
            ("First", ["Symbol", "Price"]),
            ("Second", ["Symbol\nSort table by Symbol", "Price"]),
        ]
    )

    assert extract_schema_map(_session(page)) == {"Symbol,Price": "Second"}
    collisions = [f for label, f in event_recorder if f.get("kind") == "signature_collision"]
    assert collisions and collisions[0]["previous"] == "First"


def test_empty_header_rows_are_skipped() -> None:
    page = FakePage(widgets=[("Blank", []), ("Hints", ["Sort table by Name"]), ("Ok", ["A"])])

    assert extract_schema_map(_session(page)) == {"A": "Ok"}


def test_unqueryable_page_raises_extraction_error() -> None:
    page = FakePage(snapshot_error="Execution context was destroyed")

    with pytest.raises(ExtractionError):
        extract_schema_map(_session(page))


def test_malformed_snapshot_raises_extraction_error() -> None:
    session = _session(FakePage())
    session.evaluate = lambda template, params=None: EvalResult.of("not a list")  # type: ignore[method-assign]

    with pytest.raises(ExtractionError):
        extract_schema_map(session)


def test_insert_widget_ignores_empty_signature() -> None:
    schema_map: dict[str, str] = {}
    assert insert_widget(schema_map, "", "Nothing") is False
    assert schema_map == {}


def test_get_dashboard_name_from_title() -> None:
    assert get_dashboard_name(_session(FakePage(title="Foo/Bar! - Chartink.com"))) == "Foo_Bar"


def test_get_dashboard_name_without_title() -> None:
    assert get_dashboard_name(_session(FakePage(title=None))) == "Unknown_Dashboard"
