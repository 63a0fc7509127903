"""Canonical header signatures shared by the page snapshot and the file router.

A signature is the comma-joined list of normalized header labels in column
order. Both sides of the correlation must call :func:`build_signature`; any
second implementation of the rule would silently stop files from matching.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

# DataTables appends an accessibility hint such as "Sort table by Name" to
# sortable header cells. Everything from the hint onwards is dropped.
SORT_HINT_PATTERN = re.compile(r"Sort table by.*", re.IGNORECASE | re.DOTALL)
_WHITESPACE = re.compile(r"\s+")

SEPARATOR = ","


def normalize_header(label: Optional[str]) -> str:
    """Return one header label with the sort hint removed and whitespace collapsed."""

    if label is None:
        return ""
    text = SORT_HINT_PATTERN.sub("", str(label))
    return _WHITESPACE.sub(" ", text).strip()


def build_signature(labels: Iterable[Optional[str]]) -> str:
    """Join normalized ``labels`` with commas, preserving order.

    Returns an empty string when there are no labels or every label
    normalizes to nothing; callers treat that as "no usable schema".
    Matching is case-sensitive.
    """

    normalized = [normalize_header(label) for label in labels]
    if not any(normalized):
        return ""
    return SEPARATOR.join(normalized)


__all__ = ["normalize_header", "build_signature", "SORT_HINT_PATTERN"]
