from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, TransportError
from .validation import ClientValidationError

NETWORK_MESSAGE = "Please check your connection and try again."


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def to_user_facing_error(exc: Exception, fallback: str = "Request failed") -> UserFacingError:
    if isinstance(exc, ClientValidationError):
        return UserFacingError(message=str(exc.issues[0].reason if exc.issues else exc))
    if isinstance(exc, TransportError):
        return UserFacingError(message=f"{fallback}. {NETWORK_MESSAGE}", details=exc.message)
    if isinstance(exc, ApiError):
        primary = exc.message.strip() or fallback
        details = f"{exc.code} (HTTP {exc.status_code})"
        if exc.details:
            details = f"{details}: {exc.details}"
        return UserFacingError(message=primary, details=details)
    return UserFacingError(message=fallback, details=str(exc) or type(exc).__name__)
