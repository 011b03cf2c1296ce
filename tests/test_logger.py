"""JSON log formatting."""
import json
import logging

from app.core.logger import JSONFormatter


def _record(**extra):
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "User logged in", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_includes_service_extras():
    payload = json.loads(JSONFormatter().format(_record(user_id="u-1", revoked_tokens=2)))

    assert payload["message"] == "User logged in"
    assert payload["user_id"] == "u-1"
    assert payload["revoked_tokens"] == 2


def test_formatter_includes_request_fields():
    payload = json.loads(
        JSONFormatter().format(_record(method="GET", path="/health", status_code=200, elapsed_ms=1.5))
    )

    assert payload["method"] == "GET"
    assert payload["status_code"] == 200
    assert "user_id" not in payload
