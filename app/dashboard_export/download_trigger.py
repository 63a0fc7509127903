from __future__ import annotations

from .browser import BrowserSession
from .errors import TriggerError
from .logging_utils import _scraper_event
from .scripts import TRIGGER_EXPORTS, ScriptContractError
from .selectors_dashboard import DASHBOARD_SELECTORS, DashboardSelectors


def trigger_exports(
    session: BrowserSession, selectors: DashboardSelectors = DASHBOARD_SELECTORS
) -> int:
    """Click every export control on the page and return how many were clicked.

    The count only estimates how many files will arrive. Zero means the page
    has nothing to export.
    """

    result = session.evaluate(TRIGGER_EXPORTS, selectors.as_params())
    if result.is_error:
        raise TriggerError(f"Export trigger failed: {result.error}")
    try:
        count = TRIGGER_EXPORTS.interpret(result)
    except ScriptContractError as exc:
        raise TriggerError(str(exc)) from exc

    count = count or 0
    _scraper_event("trigger", controls=count)
    return count


__all__ = ["trigger_exports"]
