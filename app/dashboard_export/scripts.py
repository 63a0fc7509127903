"""Versioned page scripts and the typed result of evaluating them.

Each template is a JavaScript arrow function taking one parameter object.
The ``returns`` text is the contract; ``validate`` enforces it once so call
sites receive a checked Python value.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

VALUE = "value"
EMPTY = "empty"
ERROR = "error"


@dataclass(frozen=True)
class EvalResult:
    """Outcome of evaluating a script: a value, no value, or an error."""

    kind: str
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def of(cls, value: Any) -> "EvalResult":
        if value is None:
            return cls(kind=EMPTY)
        return cls(kind=VALUE, value=value)

    @classmethod
    def empty(cls) -> "EvalResult":
        return cls(kind=EMPTY)

    @classmethod
    def failed(cls, error: str) -> "EvalResult":
        return cls(kind=ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.kind == VALUE

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR


class ScriptContractError(ValueError):
    """A script returned a value that does not match its declared shape."""


@dataclass(frozen=True)
class ScriptTemplate:
    name: str
    version: int
    source: str
    returns: str
    validate: Callable[[Any], Any]

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}"

    def selenium_source(self) -> str:
        """Wrap the function for ``execute_script``, which passes ``arguments``."""

        return f"return ({self.source})(arguments[0]);"

    def interpret(self, result: EvalResult) -> Any:
        """Return the validated value of ``result`` or ``None`` when absent.

        Raises ``ScriptContractError`` when the value has the wrong shape.
        Error results are left for the caller to classify.
        """

        if not result.ok:
            return None
        try:
            return self.validate(result.value)
        except (TypeError, ValueError, KeyError) as exc:
            raise ScriptContractError(f"{self.label} returned unexpected value: {exc}") from exc


def _validate_title(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return value


def _validate_widgets(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        raise TypeError(f"expected list, got {type(value).__name__}")
    widgets: List[Dict[str, Any]] = []
    for item in value:
        if not isinstance(item, dict):
            raise TypeError(f"expected object per widget, got {type(item).__name__}")
        headers = item.get("headers") or []
        if not isinstance(headers, list):
            raise TypeError("headers must be a list")
        title = item.get("title")
        widgets.append(
            {
                "title": None if title is None else str(title),
                "headers": ["" if h is None else str(h) for h in headers],
            }
        )
    return widgets


def _validate_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected number, got {type(value).__name__}")
    if value < 0 or int(value) != value:
        raise ValueError(f"expected non-negative integer, got {value!r}")
    return int(value)


DOCUMENT_TITLE = ScriptTemplate(
    name="document_title",
    version=1,
    source="() => document.title",
    returns="string: the page title",
    validate=_validate_title,
)

SCHEMA_SNAPSHOT = ScriptTemplate(
    name="schema_snapshot",
    version=1,
    source="""(params) => {
        const widgets = [];
        document.querySelectorAll(params.widget_selector).forEach((card) => {
            const table = card.querySelector(params.table_selector);
            if (!table) return;
            const titleEl = card.querySelector(params.title_selector);
            const headers = Array.from(
                table.querySelectorAll(params.header_cell_selector)
            ).map((th) => th.innerText);
            widgets.push({ title: titleEl ? titleEl.innerText : null, headers: headers });
        });
        return widgets;
    }""",
    returns=(
        "array of {title: string|null, headers: string[]} in DOM order, one per "
        "widget container holding a table; header texts are raw innerText"
    ),
    validate=_validate_widgets,
)

TRIGGER_EXPORTS = ScriptTemplate(
    name="trigger_exports",
    version=1,
    source="""(params) => {
        const buttons = document.querySelectorAll(params.export_control_selector);
        let count = 0;
        buttons.forEach((btn) => { btn.click(); count++; });
        return count;
    }""",
    returns="integer: number of export controls clicked",
    validate=_validate_count,
)


__all__ = [
    "EvalResult",
    "ScriptTemplate",
    "ScriptContractError",
    "DOCUMENT_TITLE",
    "SCHEMA_SNAPSHOT",
    "TRIGGER_EXPORTS",
]
