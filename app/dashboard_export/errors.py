from __future__ import annotations

from .error_codes import ErrorCode


class ScraperError(Exception):
    """Base class for scrape failures carrying a stable ``error_code``."""

    default_code = ErrorCode.INTERNAL

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code or self.default_code

    def __str__(self) -> str:  # pragma: no cover - inherited behaviour
        return str(self.args[0]) if self.args else ""


class BrowserConnectionError(ScraperError):
    """The browser could not be reached or configured. Fatal."""

    default_code = ErrorCode.CONNECTION


class NavigationError(ScraperError):
    """A page failed to load. Retried, then fatal for the page."""

    default_code = ErrorCode.NAVIGATION


class ExtractionError(ScraperError):
    """The page DOM could not be queried for a schema snapshot."""

    default_code = ErrorCode.EXTRACTION


class TriggerError(ScraperError):
    """Export controls could not be invoked."""

    default_code = ErrorCode.TRIGGER


class FileProcessingError(ScraperError):
    """A single staged file could not be read. Isolated to that file."""

    default_code = ErrorCode.FILE_PROCESSING


__all__ = [
    "ScraperError",
    "BrowserConnectionError",
    "NavigationError",
    "ExtractionError",
    "TriggerError",
    "FileProcessingError",
]
