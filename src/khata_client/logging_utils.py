from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

_FORBIDDEN_CONTEXT_KEYS = {
    "authorization",
    "email",
    "password",
    "phone",
    "phone_number",
    "token",
}

# LogRecord attributes that are not user context.
_RESERVED_RECORD_KEYS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_KEYS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | None = None) -> None:
    resolved = (level or os.getenv("KHATA_LOG_LEVEL") or "WARNING").upper()
    root = logging.getLogger("khata_client")
    root.setLevel(resolved)
    if not any(isinstance(h.formatter, JsonLineFormatter) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonLineFormatter())
        root.addHandler(handler)


def _validate_context(context: dict[str, Any]) -> None:
    illegal = sorted(key for key in context if key.lower() in _FORBIDDEN_CONTEXT_KEYS)
    if illegal:
        raise ValueError(f"PII-like keys are forbidden in log context: {illegal}")


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    outcome: str,
    **context: Any,
) -> None:
    _validate_context(context)
    logger.info(
        json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": "INFO",
                "module": module,
                "action": action,
                "outcome": outcome,
                **context,
            },
            default=str,
        )
    )
