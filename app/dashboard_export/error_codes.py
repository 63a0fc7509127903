from __future__ import annotations

"""Centralised error code taxonomy for scrape failures.

These codes appear in structured logs and run telemetry so that a failed or
degraded run can be explained after the fact. Keep them stable for reporting.
"""


class ErrorCode:
    CONNECTION = "connection_failure"
    NAVIGATION = "navigation_failure"
    EXTRACTION = "extraction_failure"
    TRIGGER = "trigger_failure"
    DOWNLOAD_TIMEOUT = "download_timeout"
    FILE_PROCESSING = "file_processing_failure"
    UNMATCHED_SCHEMA = "unmatched_schema"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
