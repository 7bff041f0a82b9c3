import json
import logging

import pytest

from jazzcomposer.logging_utils import (
    RequestContextFilter,
    StructuredFormatter,
    clear_request_context,
    log_event,
    set_request_context,
    timed_event,
)


def _record(event: str, **fields) -> logging.LogRecord:
    record = logging.LogRecord("jazzcomposer.test", logging.INFO, __file__, 1, event, None, None)
    record.__dict__.update({"event": event, **fields})
    RequestContextFilter().filter(record)
    return record


def test_filter_stamps_request_context():
    set_request_context(request_id="req-42", route="/api/arrangement", method="POST")
    try:
        record = _record("arrangement_inputs_received")
    finally:
        clear_request_context()

    assert record.request_id == "req-42"
    assert record.route == "/api/arrangement"
    assert record.method == "POST"


def test_json_formatter_includes_custom_fields():
    line = StructuredFormatter(json_output=True).format(_record("lyrics_generated", seed=0.5, title="Amber neon lullaby in D Major"))
    payload = json.loads(line)

    assert payload["event"] == "lyrics_generated"
    assert payload["request_id"] == "-"
    assert payload["seed"] == 0.5
    assert payload["title"] == "Amber neon lullaby in D Major"
    assert "message" not in payload


def test_text_formatter_orders_core_fields_first():
    line = StructuredFormatter(json_output=False).format(_record("playback_session_built", key="Eb", status_code=200))

    assert line.split(" ")[1:6] == [
        "level=INFO",
        "event=playback_session_built",
        "request_id=-",
        "method=-",
        "route=-",
    ]
    assert "status_code=200" in line
    assert line.endswith("key=Eb")


def test_timed_event_logs_completion_summary(caplog):
    logger = logging.getLogger("jazzcomposer.test")
    with caplog.at_level(logging.DEBUG):
        with timed_event(logger, "arrangement_generation", tonic="C") as summary:
            summary["bass_event_count"] = 84

    events = [getattr(record, "event", None) for record in caplog.records]
    assert events == ["arrangement_generation_started", "arrangement_generation_completed"]
    completed = caplog.records[-1]
    assert completed.tonic == "C"
    assert completed.bass_event_count == 84
    assert completed.duration_ms >= 0


def test_timed_event_logs_and_reraises_failures(caplog):
    logger = logging.getLogger("jazzcomposer.test")
    with pytest.raises(RuntimeError):
        with timed_event(logger, "arrangement_generation", tonic="C"):
            raise RuntimeError("boom")

    failed = [record for record in caplog.records if getattr(record, "event", None) == "arrangement_generation_failed"]
    assert failed
    assert failed[0].levelno == logging.ERROR
    assert failed[0].exception_type == "RuntimeError"


def test_log_event_passes_fields_as_record_attributes(caplog):
    logger = logging.getLogger("jazzcomposer.test")
    with caplog.at_level(logging.INFO):
        log_event(logger, "validation_passed", action="Blueprint", total_measures=21)

    record = caplog.records[-1]
    assert record.event == "validation_passed"
    assert record.total_measures == 21
