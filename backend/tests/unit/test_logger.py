"""Tests for the JSON log formatter and request correlation."""

from __future__ import annotations

import json
import logging

from commerce_api.core.logger import JSONFormatter, ensure_request_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("commerce_api.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_outputs_json_with_known_extras() -> None:
    payload = json.loads(JSONFormatter().format(_record(order_id=5, user_id=2, secret="x")))

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["order_id"] == 5
    assert payload["user_id"] == 2
    assert "secret" not in payload


def test_request_id_is_taken_from_header(app) -> None:
    # A fresh app context gives a fresh ``g``
    with app.app_context(), app.test_request_context("/", headers={"X-Request-ID": "abc-123"}):
        assert ensure_request_id() == "abc-123"


def test_request_id_is_stable_within_a_request(app) -> None:
    with app.app_context(), app.test_request_context("/"):
        assert ensure_request_id() == ensure_request_id()


def test_response_carries_request_id(client) -> None:
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "trace-me"})
    assert resp.headers["X-Request-ID"] == "trace-me"
