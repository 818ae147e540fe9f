import json
import logging

import pytest

from internship_portal.services.logging import StructuredLogger
from internship_portal.services.telemetry import telemetry_span


def test_human_readable_console(caplog, monkeypatch):
    monkeypatch.setenv("PORTAL_LOG_FORMAT", "human")
    caplog.set_level(logging.INFO)

    logger = StructuredLogger("test-logger")
    logger.info("test.event", user="alice", attempt=1, flagged=True)

    records = [record for record in caplog.records if record.name == "test-logger"]
    assert records
    message = records[-1].message
    assert "test.event" in message
    assert "user=alice" in message
    assert "attempt=1" in message
    assert "flagged=true" in message


def test_json_payload_carries_session_context(caplog, monkeypatch):
    monkeypatch.setenv("PORTAL_LOG_FORMAT", "json")
    caplog.set_level(logging.DEBUG, logger="test-json")

    logger = StructuredLogger("test-json")
    logger.configure_context(app_name="internship-portal", environment="DEV", user_id="sup-1", role="supervisor")
    logger.set_page("reports")
    logger.warning("reports.misconduct.fetch.failed", error="boom")

    records = [record for record in caplog.records if record.name == "test-json"]
    assert records[-1].levelno == logging.WARNING
    body = json.loads(records[-1].message)
    assert body["event"] == "reports.misconduct.fetch.failed"
    assert body["environment"] == "dev"
    assert body["user_id"] == "sup-1"
    assert body["role"] == "supervisor"
    assert body["page"] == "reports"
    assert body["error"] == "boom"


def test_console_can_be_disabled(caplog, monkeypatch):
    monkeypatch.setenv("PORTAL_DISABLE_CONSOLE_LOGS", "1")
    caplog.set_level(logging.DEBUG, logger="test-silent")

    StructuredLogger("test-silent").error("anything")

    assert not [record for record in caplog.records if record.name == "test-silent"]


def test_telemetry_span_logs_duration_and_reraises(caplog, monkeypatch):
    monkeypatch.setenv("PORTAL_LOG_FORMAT", "human")
    caplog.set_level(logging.DEBUG, logger="test-span")
    logger = StructuredLogger("test-span")

    with telemetry_span(logger, "reports.fetch", kind="progress") as span:
        pass
    assert span.elapsed_ms >= 0

    try:
        with telemetry_span(logger, "reports.fetch", kind="progress"):
            raise RuntimeError("network down")
    except RuntimeError:
        pass
    else:  # pragma: no cover
        raise AssertionError("span swallowed the error")

    messages = [record.message for record in caplog.records if record.name == "test-span"]
    assert any("telemetry.span.finish" in message and "duration_ms=" in message for message in messages)
    assert any("telemetry.span.error" in message and "network down" in message for message in messages)


def test_bound_fields_and_shared_context(caplog, monkeypatch):
    monkeypatch.setenv("PORTAL_LOG_FORMAT", "both")
    caplog.set_level(logging.INFO, logger="test-bind")

    parent = StructuredLogger("test-bind")
    child = parent.bind(tab="documents")
    parent.set_page("documents")
    child.info("documents.verify.done", report_id="j1")

    messages = [record.message for record in caplog.records if record.name == "test-bind"]
    body = json.loads(messages[-2])
    assert body["tab"] == "documents"
    assert body["page"] == "documents"
    assert "(documents)" in messages[-1]
    assert "report_id=j1" in messages[-1]


def test_unknown_context_field_is_rejected():
    logger = StructuredLogger("test-context")
    with pytest.raises(TypeError):
        logger.configure_context(region="eu")


def test_slow_span_finishes_as_warning(caplog, monkeypatch):
    monkeypatch.setenv("PORTAL_LOG_FORMAT", "human")
    caplog.set_level(logging.INFO, logger="test-slow")
    logger = StructuredLogger("test-slow")

    with telemetry_span(logger, "companies.page.fetch", slow_ms=0, page=2) as span:
        pass

    assert span.outcome == "ok"
    finish = [record for record in caplog.records if record.name == "test-slow"][-1]
    assert finish.levelno == logging.WARNING
    assert "slow=true" in finish.message
    assert "page=2" in finish.message
