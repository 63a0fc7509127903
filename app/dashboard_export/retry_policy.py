from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Type, TypeVar

from .error_codes import ErrorCode
from .errors import ScraperError
from .logging_utils import _scraper_event

T = TypeVar("T")

RETRYABLE_ERROR_CODES = {
    ErrorCode.NAVIGATION,
}

NON_RETRYABLE_ERROR_CODES = {
    ErrorCode.CONNECTION,
    ErrorCode.EXTRACTION,
    ErrorCode.TRIGGER,
    # Per-file failures are isolated by the router, never retried.
    ErrorCode.FILE_PROCESSING,
    # Expected outcomes, not failures.
    ErrorCode.UNMATCHED_SCHEMA,
    ErrorCode.DOWNLOAD_TIMEOUT,
}


def decide_retry(
    attempt_index: int,
    max_attempts: int,
    error: BaseException | None = None,
    *,
    error_code: Optional[str] = None,
) -> bool:
    """Decide whether a failed attempt should be retried."""

    if attempt_index >= max_attempts:
        _scraper_event(
            "state",
            phase="retry_decision",
            kind="capped",
            attempt=attempt_index,
            max_attempts=max_attempts,
            error_code=error_code,
            will_retry=False,
        )
        return False

    code = (error_code or "").strip()
    if code in RETRYABLE_ERROR_CODES:
        _scraper_event(
            "state",
            phase="retry_decision",
            kind="retryable",
            error_code=code,
            attempt=attempt_index,
            max_attempts=max_attempts,
            will_retry=True,
        )
        return True

    _scraper_event(
        "state",
        phase="retry_decision",
        kind="non_retryable" if code in NON_RETRYABLE_ERROR_CODES else (
            "unknown" if code else "missing_error_code"
        ),
        error_code=code or None,
        attempt=attempt_index,
        max_attempts=max_attempts,
        will_retry=False,
        error_repr=repr(error) if error is not None else None,
    )
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with an explicit delay schedule.

    ``delays[i]`` is slept after failed attempt ``i + 1``; the operation runs
    at most ``len(delays) + 1`` times. Only ``ScraperError`` subclasses listed
    in ``retry_on`` whose code ``decide_retry`` accepts are retried.
    """

    delays: Tuple[float, ...]
    retry_on: Tuple[Type[ScraperError], ...] = (ScraperError,)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    @property
    def max_attempts(self) -> int:
        return len(self.delays) + 1

    def call(self, operation: Callable[[], T], *, label: str = "") -> T:
        """Run ``operation`` until it succeeds or the schedule is exhausted."""

        attempt = 1
        while True:
            try:
                return operation()
            except self.retry_on as exc:
                code = getattr(exc, "error_code", None)
                if not decide_retry(attempt, self.max_attempts, exc, error_code=code):
                    raise
                delay = self.delays[attempt - 1]
                _scraper_event(
                    "warn",
                    phase="retry",
                    operation=label,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay=delay,
                    error=str(exc),
                )
                self.sleep(delay)
                attempt += 1


__all__ = [
    "RetryPolicy",
    "decide_retry",
    "RETRYABLE_ERROR_CODES",
    "NON_RETRYABLE_ERROR_CODES",
]
