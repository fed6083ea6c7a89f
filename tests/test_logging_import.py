"""
Logging tests: level filtering, JSON event_type rendering, request binding.
"""

from __future__ import annotations

import io
import json

import pytest

from vision_risk.vision_logging import bind_request, configure_logging, get_logger


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    configure_logging(level="WARNING", fmt="json", stream=stream)
    yield stream
    configure_logging()


def _records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_level_filters_and_json_carries_event_type(log_stream):
    """Events below the configured level are dropped; the rest render as JSON lines."""
    logger = get_logger("vision_risk.test")
    logger.info("quiet_event", key="value")
    logger.warning("loud_event", key="value")

    records = _records(log_stream)
    assert len(records) == 1
    assert records[0]["event_type"] == "loud_event"
    assert records[0]["key"] == "value"
    assert records[0]["level"] == "warning"
    assert records[0]["logger"] == "vision_risk.test"
    assert "timestamp" in records[0]
    assert "event" not in records[0]


def test_reconfigured_level_applies_to_existing_logger(log_stream):
    """A logger bound before a reconfigure follows the new level."""
    logger = get_logger("vision_risk.test")
    logger.info("before_reconfigure")
    configure_logging(level="DEBUG", fmt="json", stream=log_stream)
    logger.info("after_reconfigure")
    assert [r["event_type"] for r in _records(log_stream)] == ["after_reconfigure"]


def test_bind_request_adds_request_fields(log_stream):
    """bind_request carries request_id and kind onto every event."""
    bind_request("req-1", "SCORE_ONE").error("request_failed", error="boom")
    (record,) = _records(log_stream)
    assert record["request_id"] == "req-1"
    assert record["kind"] == "SCORE_ONE"
    assert record["event_type"] == "request_failed"
