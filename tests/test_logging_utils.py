import logging

from app.dashboard_export import logging_utils


def _capture(monkeypatch):
    events: list[tuple[str, int]] = []
    monkeypatch.setattr(
        logging_utils, "log_line", lambda msg, level=logging.INFO: events.append((msg, level))
    )
    return events


def test_scraper_event_label_and_phase(monkeypatch):
    events = _capture(monkeypatch)

    logging_utils._scraper_event("state", phase="retry_decision", kind="capped")

    line, level = events[-1]
    assert line.startswith("[SCRAPER][STATE]")
    assert "phase='retry_decision'" in line
    assert "kind='capped'" in line
    assert level == logging.INFO


def test_scraper_event_phase_only(monkeypatch):
    events = _capture(monkeypatch)

    logging_utils._scraper_event(phase="snapshot", widgets=3)

    line, _ = events[-1]
    assert line.startswith("[SCRAPER][SNAPSHOT]")
    assert "widgets=3" in line
    assert "phase=" not in line


def test_warn_and_error_levels(monkeypatch):
    events = _capture(monkeypatch)

    logging_utils._scraper_event("warn", phase="watch", kind="download_timeout")
    logging_utils._scraper_event("error", phase="route", file="a.csv")

    assert [level for _, level in events] == [logging.WARNING, logging.ERROR]


def test_scraper_event_never_raises(monkeypatch):
    def _boom(msg, level=logging.INFO):
        raise RuntimeError("handler gone")

    monkeypatch.setattr(logging_utils, "log_line", _boom)

    logging_utils._scraper_event("route", matched=1)
