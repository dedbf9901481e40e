from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"


class AuthError(ApiError):
    """Authentication failed or session is invalid."""


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    """400/422 returned by the backend."""


class ConflictError(ApiError):
    pass


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class RedirectError(ApiError):
    """3xx response; redirects are never followed."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class ContractError(ApiError):
    """2xx response that does not carry what the endpoint promises."""


class MissingTokenError(ContractError):
    """Login answered 2xx without a token."""


class StorageError(OSError):
    """Key-value store could not be read or written."""
