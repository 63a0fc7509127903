"""Snapshot of widget identity taken before any export is triggered."""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from . import config
from .browser import BrowserSession
from .errors import ExtractionError
from .logging_utils import _scraper_event
from .scripts import DOCUMENT_TITLE, SCHEMA_SNAPSHOT, ScriptContractError
from .selectors_dashboard import DASHBOARD_SELECTORS, DashboardSelectors
from .signature import build_signature
from .utils import sanitize_dashboard_name, sanitize_widget_name

# signature -> sanitized widget name, valid for a single page visit.
SchemaMap = Dict[str, str]


def insert_widget(schema_map: SchemaMap, signature: str, widget_name: str) -> bool:
    """Record ``signature -> widget_name``; the latest insertion wins.

    Empty signatures are never stored. Returns ``True`` when an existing
    entry was replaced.
    """

    if not signature:
        return False
    replaced = signature in schema_map and schema_map[signature] != widget_name
    if replaced:
        _scraper_event(
            "warn",
            phase="snapshot",
            kind="signature_collision",
            signature=signature,
            previous=schema_map[signature],
            widget=widget_name,
        )
    schema_map[signature] = widget_name
    return replaced


def get_dashboard_name(
    session: BrowserSession, suffixes: Iterable[str] = config.TITLE_SUFFIXES
) -> str:
    """Derive the output folder name from the current page title."""

    result = session.evaluate(DOCUMENT_TITLE)
    try:
        title: Optional[str] = DOCUMENT_TITLE.interpret(result)
    except ScriptContractError:
        title = None
    if result.is_error:
        _scraper_event("warn", phase="snapshot", kind="title_unavailable", error=result.error)
    return sanitize_dashboard_name(title, suffixes)


def extract_schema_map(
    session: BrowserSession, selectors: DashboardSelectors = DASHBOARD_SELECTORS
) -> SchemaMap:
    """Build the signature-to-widget mapping from the live page.

    Widgets without a table, or whose header row normalizes to nothing, are
    skipped. Raises ``ExtractionError`` when the page cannot be queried.
    """

    result = session.evaluate(SCHEMA_SNAPSHOT, selectors.as_params())
    if result.is_error:
        raise ExtractionError(f"Schema snapshot failed: {result.error}")
    try:
        widgets = SCHEMA_SNAPSHOT.interpret(result) or []
    except ScriptContractError as exc:
        raise ExtractionError(str(exc)) from exc

    schema_map: SchemaMap = {}
    skipped = 0
    for widget in widgets:
        signature = build_signature(widget["headers"])
        if not signature:
            skipped += 1
            continue
        insert_widget(schema_map, signature, sanitize_widget_name(widget["title"]))

    _scraper_event(
        "snapshot",
        widgets=len(widgets),
        signatures=len(schema_map),
        skipped=skipped,
    )
    return schema_map


__all__ = ["SchemaMap", "extract_schema_map", "get_dashboard_name", "insert_widget"]
