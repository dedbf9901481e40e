from __future__ import annotations

import json
import logging

import pytest

from khata_client.logging_utils import JsonLineFormatter, log_action


def test_log_action_emits_one_json_line(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("khata_client.test")
    with caplog.at_level(logging.INFO, logger="khata_client.test"):
        log_action(logger, "inventory", "refresh", "success", count=3)

    payload = json.loads(caplog.records[0].getMessage())
    assert payload["module"] == "inventory"
    assert payload["action"] == "refresh"
    assert payload["outcome"] == "success"
    assert payload["count"] == 3


@pytest.mark.parametrize("key", ["phone_number", "Password", "token", "authorization", "email"])
def test_log_action_rejects_pii_keys(key: str) -> None:
    with pytest.raises(ValueError, match="PII"):
        log_action(logging.getLogger("khata_client.test"), "auth", "login", "success", **{key: "x"})


def test_json_line_formatter_includes_extra_fields() -> None:
    record = logging.makeLogRecord(
        {"name": "khata_client.http_client", "levelname": "WARNING", "msg": "api_error", "status_code": 503}
    )

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["event"] == "api_error"
    assert payload["logger"] == "khata_client.http_client"
    assert payload["status_code"] == 503
    assert "msg" not in payload
