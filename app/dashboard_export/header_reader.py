from __future__ import annotations

from pathlib import Path
from typing import List
from zipfile import BadZipFile

import pandas as pd

from .errors import FileProcessingError

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def read_header_row(path: Path) -> List[str]:
    """Return the raw first row of a CSV or Excel export, left to right.

    Only one row is parsed. Cells are read as text so labels such as ``2024``
    keep their original spelling, and duplicate labels are not renamed.
    """

    path = Path(path)
    try:
        if path.suffix.lower() in EXCEL_SUFFIXES:
            frame = pd.read_excel(path, header=None, nrows=1, dtype=str, keep_default_na=False)
        else:
            frame = pd.read_csv(
                path,
                header=None,
                nrows=1,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
            )
    except (OSError, ValueError, BadZipFile, pd.errors.ParserError) as exc:
        raise FileProcessingError(f"Unable to read header row from {path.name}: {exc}") from exc

    if frame.empty:
        raise FileProcessingError(f"No header row in {path.name}")
    return ["" if pd.isna(cell) else str(cell) for cell in frame.iloc[0].tolist()]


__all__ = ["read_header_row"]
