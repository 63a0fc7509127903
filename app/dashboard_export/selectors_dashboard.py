from __future__ import annotations

"""Selectors and hints for Chartink-style dashboard pages."""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class DashboardSelectors:
    """DOM hints for one dashboard layout.

    Every exportable widget is a card (``div.card``) holding a title element
    and exactly one DataTables table. Export buttons are the DataTables HTML5
    buttons rendered next to each table.
    """

    widget_selector: str = "div.card"
    title_selector: str = ".card-header, h1, h2, h3, h4, h5, h6"
    table_selector: str = "table"
    header_cell_selector: str = "th"
    export_control_selector: str = ".buttons-csv, .buttons-excel, a.buttons-html5"

    def as_params(self) -> Dict[str, Any]:
        """Return the selectors as the parameter object passed to page scripts."""

        return asdict(self)


DASHBOARD_SELECTORS = DashboardSelectors()

__all__ = ["DashboardSelectors", "DASHBOARD_SELECTORS"]
