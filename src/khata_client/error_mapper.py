from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    RedirectError,
    ServerError,
    ValidationError,
)

DEFAULT_FALLBACK_MESSAGE = "Request failed"


def payload_message(payload: Mapping[str, object] | None) -> str | None:
    """Return the server-provided message; the backend uses ``message`` or ``error``."""
    if not payload:
        return None
    for key in ("message", "error", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def map_error(
    status_code: int,
    payload: Mapping[str, object] | None,
    fallback_message: str | None = None,
) -> ApiError:
    payload = payload or {}
    code = str(payload.get("code") or "HTTP_ERROR")
    message = payload_message(payload) or fallback_message or DEFAULT_FALLBACK_MESSAGE
    details = payload.get("details")
    mapped: type[ApiError]
    if 300 <= status_code < 400:
        mapped = RedirectError
    elif status_code == 401:
        mapped = AuthError
    elif status_code == 403:
        mapped = ForbiddenError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        status_code=status_code,
        raw_payload=dict(payload),
    )
