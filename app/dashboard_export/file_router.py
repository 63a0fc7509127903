"""Route settled downloads to ``<output_root>/<dashboard>/<widget>.<ext>``."""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from . import config
from .error_codes import ErrorCode
from .errors import FileProcessingError
from .header_reader import read_header_row
from .logging_utils import _scraper_event
from .signature import build_signature
from .telemetry import RunTelemetry
from .utils import log_line

MATCHED = "matched"
UNMATCHED = "unmatched"
FAILED = "failed"


@dataclass
class RoutingReport:
    dashboard: str
    matched: List[Tuple[str, str]] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def considered(self) -> int:
        return len(self.matched) + len(self.unmatched) + len(self.failed)


def list_candidates(staging_dir: Path, accepted_extensions: Iterable[str]) -> List[Path]:
    """Staged files whose extension is accepted, in name order."""

    accepted = {ext.lower() for ext in accepted_extensions}
    return sorted(
        p for p in Path(staging_dir).iterdir() if p.is_file() and p.suffix.lower() in accepted
    )


def _move_overwrite(source: Path, target: Path) -> None:
    if target.exists():
        target.unlink()
    shutil.move(str(source), str(target))


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        log_line(f"Unable to remove staged file {path.name}: {exc}", logging.WARNING)


def route_downloads(
    staging_dir: Path,
    schema_map: Mapping[str, str],
    dashboard_name: str,
    output_root: Path,
    *,
    accepted_extensions: Iterable[str] = config.ACCEPTED_EXTENSIONS,
    telemetry: Optional[RunTelemetry] = None,
) -> RoutingReport:
    """Match every accepted staged file against ``schema_map`` and route it.

    Matches are moved into the dashboard folder, replacing any earlier file
    for the same widget. Unmatched files are deleted. A file that cannot be
    read is logged and recorded as failed, then removed from staging so a
    later page does not pick it up. Files with other extensions are left alone.
    """

    report = RoutingReport(dashboard=dashboard_name)
    target_folder = Path(output_root) / dashboard_name
    target_folder.mkdir(parents=True, exist_ok=True)

    for file_path in list_candidates(staging_dir, accepted_extensions):
        try:
            signature = build_signature(read_header_row(file_path))
            widget = schema_map.get(signature) if signature else None
            if widget is None:
                _scraper_event(
                    "warn",
                    phase="route",
                    kind=ErrorCode.UNMATCHED_SCHEMA,
                    file=file_path.name,
                    signature=signature,
                )
                _discard(file_path)
                report.unmatched.append(file_path.name)
                if telemetry is not None:
                    telemetry.add(UNMATCHED, ErrorCode.UNMATCHED_SCHEMA, {
                        "dashboard": dashboard_name,
                        "file": file_path.name,
                        "signature": signature,
                    })
                continue

            target_path = target_folder / f"{widget}{file_path.suffix.lower()}"
            _move_overwrite(file_path, target_path)
        except (FileProcessingError, OSError) as exc:
            _scraper_event(
                "error",
                phase="route",
                kind=getattr(exc, "error_code", ErrorCode.FILE_PROCESSING),
                file=file_path.name,
                error=str(exc),
            )
            _discard(file_path)
            report.failed.append(file_path.name)
            if telemetry is not None:
                telemetry.add(FAILED, ErrorCode.FILE_PROCESSING, {
                    "dashboard": dashboard_name,
                    "file": file_path.name,
                    "error": str(exc),
                })
            continue

        log_line(f"Processed: {widget} -> {target_path}")
        report.matched.append((file_path.name, widget))
        if telemetry is not None:
            telemetry.add(MATCHED, "", {
                "dashboard": dashboard_name,
                "widget": widget,
                "file": file_path.name,
                "target": str(target_path),
            })

    _scraper_event(
        "route",
        dashboard=dashboard_name,
        matched=len(report.matched),
        unmatched=len(report.unmatched),
        failed=len(report.failed),
    )
    return report


__all__ = ["RoutingReport", "route_downloads", "list_candidates", "MATCHED", "UNMATCHED", "FAILED"]
