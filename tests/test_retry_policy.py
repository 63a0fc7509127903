from __future__ import annotations

import pytest

from app.dashboard_export import retry_policy
from app.dashboard_export.error_codes import ErrorCode
from app.dashboard_export.errors import ExtractionError, NavigationError
from app.dashboard_export.retry_policy import RetryPolicy


@pytest.mark.parametrize(
    "attempt, expected, kind",
    [
        (1, True, "retryable"),
        (3, True, "retryable"),
        (4, False, "capped"),
        (6, False, "capped"),
    ],
)
def test_navigation_retry_limits(
    attempt: int, expected: bool, kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    result = retry_policy.decide_retry(attempt, 4, error_code=ErrorCode.NAVIGATION)
    assert result is expected
    assert len(event_recorder) == 1
    label, fields = event_recorder[0]
    assert label == "state"
    assert fields["phase"] == "retry_decision"
    assert fields["attempt"] == attempt
    assert fields["max_attempts"] == 4
    assert fields["will_retry"] is expected
    assert fields["kind"] == kind


@pytest.mark.parametrize(
    "error_code",
    [ErrorCode.CONNECTION, ErrorCode.EXTRACTION, ErrorCode.TRIGGER, ErrorCode.FILE_PROCESSING],
)
def test_non_retryable_error_codes(error_code: str, event_recorder: list[tuple[str, dict]]) -> None:
    assert error_code in retry_policy.NON_RETRYABLE_ERROR_CODES
    assert retry_policy.decide_retry(1, 4, error_code=error_code) is False
    _, fields = event_recorder[0]
    assert fields["kind"] == "non_retryable"
    assert fields["error_code"] == error_code


@pytest.mark.parametrize(
    "error_code, kind",
    [("mystery", "unknown"), (None, "missing_error_code")],
)
def test_unclassified_codes_do_not_retry(
    error_code, kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    assert retry_policy.decide_retry(1, 4, RuntimeError("x"), error_code=error_code) is False
    _, fields = event_recorder[0]
    assert fields["kind"] == kind
    assert fields["error_repr"] == "RuntimeError('x')"


def test_policy_sleeps_through_schedule_then_succeeds(event_recorder) -> None:
    slept: list[float] = []
    attempts = {"n": 0}

    def _flaky() -> str:
        attempts["n"] += 1
        if attempts["n"] < 3:
            raise NavigationError("net::ERR_CONNECTION_RESET")
        return "ok"

    policy = RetryPolicy(delays=(2.0, 5.0, 10.0), sleep=slept.append)

    assert policy.call(_flaky, label="nav") == "ok"
    assert slept == [2.0, 5.0]
    retries = [f for label, f in event_recorder if label == "warn"]
    assert [f["attempt"] for f in retries] == [1, 2]
    assert retries[0]["operation"] == "nav"


def test_policy_gives_up_after_last_delay() -> None:
    slept: list[float] = []
    calls = {"n": 0}

    def _always_fails() -> None:
        calls["n"] += 1
        raise NavigationError("timeout")

    policy = RetryPolicy(delays=(2.0, 5.0, 10.0), sleep=slept.append)

    with pytest.raises(NavigationError):
        policy.call(_always_fails)
    assert calls["n"] == 4
    assert slept == [2.0, 5.0, 10.0]


def test_policy_does_not_retry_other_error_codes() -> None:
    slept: list[float] = []

    def _broken() -> None:
        raise ExtractionError("bad DOM")

    with pytest.raises(ExtractionError):
        RetryPolicy(delays=(1.0,), sleep=slept.append).call(_broken)
    assert slept == []


def test_policy_lets_unlisted_exceptions_through() -> None:
    def _bug() -> None:
        raise KeyError("oops")

    with pytest.raises(KeyError):
        RetryPolicy(delays=(1.0,), sleep=lambda _s: None).call(_bug)


def test_policy_retries_with_real_event_logging(isolated_data_dir) -> None:
    slept: list[float] = []
    attempts = {"n": 0}

    def _flaky() -> str:
        attempts["n"] += 1
        if attempts["n"] == 1:
            raise NavigationError("net::ERR_TIMED_OUT")
        return "loaded"

    policy = RetryPolicy(delays=(2.0, 5.0, 10.0), retry_on=(NavigationError,), sleep=slept.append)

    assert policy.call(_flaky, label="https://chartink.com/dashboard/208896") == "loaded"
    assert attempts["n"] == 2
    assert slept == [2.0]
    log_text = (isolated_data_dir / "logs" / "latest.log").read_text(encoding="utf-8")
    assert "[SCRAPER][WARN]" in log_text
    assert "operation='https://chartink.com/dashboard/208896'" in log_text
