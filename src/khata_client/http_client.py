from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error, payload_message
from .exceptions import ContractError, TransportError
from .session_state import SessionEventKind, SessionState
from .storage import SessionStore, StorageKey

logger = logging.getLogger(__name__)

JsonPayload = dict[str, Any] | list[Any] | None
FileField = tuple[str, bytes, str]

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# Fragments of a 401 message that mean the stored token itself is unusable.
_TOKEN_INVALID_PHRASES = ("invalid or expired", "expired token", "token expired", "token has expired")


@dataclass
class RequestContext:
    method: str
    path: str
    url: str
    headers: dict[str, str]
    json_body: Any = None
    params: dict[str, Any] | None = None
    data: dict[str, Any] | None = None
    files: dict[str, FileField] | None = None

    @property
    def is_multipart(self) -> bool:
        return bool(self.files)


RequestInterceptor = Callable[[RequestContext], None]
ResponseInterceptor = Callable[[requests.Response], None]


@dataclass
class LastOperation:
    operation: str
    duration_ms: int
    result: str
    status_code: int


def attach_bearer_token(store: SessionStore) -> RequestInterceptor:
    def _interceptor(context: RequestContext) -> None:
        token = store.token()
        if token:
            context.headers["Authorization"] = f"Bearer {token}"

    return _interceptor


def is_token_invalidation_message(message: str | None) -> bool:
    if not message:
        return False
    text = message.lower()
    if any(phrase in text for phrase in _TOKEN_INVALID_PHRASES):
        return True
    return "token" in text and ("invalid" in text or "expired" in text)


def _safe_json(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def invalidate_session_on_401(
    store: SessionStore,
    session_state: SessionState | None = None,
) -> ResponseInterceptor:
    """Clear the stored session only when a 401 blames the token.

    A 401 for any other reason (wrong password at login) leaves the stored
    session untouched.
    """

    def _interceptor(response: requests.Response) -> None:
        if response.status_code != 401:
            return
        payload = _safe_json(response)
        message = payload_message(payload) if isinstance(payload, dict) else None
        if not is_token_invalidation_message(message):
            return
        logger.warning("session_invalidated_by_server")
        store.remove(StorageKey.AUTH_TOKEN)
        store.remove(StorageKey.USER_DATA)
        if session_state is not None:
            session_state.publish(SessionEventKind.INVALIDATED, reason=message)

    return _interceptor


@dataclass
class HttpClient:
    config: ClientConfig
    store: SessionStore
    session_state: SessionState | None = None
    session: requests.Session | None = None
    request_interceptors: list[RequestInterceptor] | None = None
    response_interceptors: list[ResponseInterceptor] | None = None
    last_operation: LastOperation | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
                max_retries=0,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        if self.request_interceptors is None:
            self.request_interceptors = [attach_bearer_token(self.store)]
        if self.response_interceptors is None:
            self.response_interceptors = [invalidate_session_on_401(self.store, self.session_state)]

    def build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, FileField] | None = None,
        operation: str = "unknown",
        fallback_message: str | None = None,
    ) -> JsonPayload:
        response = self._send(
            method,
            path,
            json_body=json_body,
            params=params,
            data=data,
            files=files,
            accept="application/json",
            operation=operation,
            fallback_message=fallback_message,
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ContractError(
                code="INVALID_JSON",
                message=fallback_message or "Server returned an unreadable response",
                details={"content_type": response.headers.get("Content-Type")},
                status_code=response.status_code,
                raw_payload=response.text[:500],
            ) from exc

    def request_bytes(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        operation: str = "unknown",
        fallback_message: str | None = None,
        accept: str = "*/*",
    ) -> bytes:
        response = self._send(
            method,
            path,
            json_body=json_body,
            params=params,
            accept=accept,
            operation=operation,
            fallback_message=fallback_message,
        )
        return response.content

    def _send(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, FileField] | None = None,
        accept: str,
        operation: str,
        fallback_message: str | None,
    ) -> requests.Response:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        headers = dict(DEFAULT_HEADERS)
        headers["Accept"] = accept
        context = RequestContext(
            method=method.upper(),
            path=path,
            url=self.build_url(path),
            headers=headers,
            json_body=json_body,
            params=params,
            data=data,
            files=files,
        )
        if context.is_multipart:
            # requests must write the multipart boundary itself.
            context.headers.pop("Content-Type", None)
        for interceptor in self.request_interceptors or []:
            interceptor(context)

        logger.debug(
            "api_request",
            extra={"method": context.method, "path": context.path, "operation": operation, "multipart": context.is_multipart},
        )
        started = time.monotonic()
        try:
            response = self.session.request(
                method=context.method,
                url=context.url,
                headers=context.headers,
                json=None if context.is_multipart else context.json_body,
                data=context.data if context.is_multipart else None,
                files=context.files,
                params=context.params,
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_ssl,
                allow_redirects=False,
            )
        except requests.Timeout as exc:
            self._record(operation, started, "timeout", 0)
            logger.warning("api_transport_error", extra={"operation": operation, "error_type": "Timeout"})
            raise TransportError(
                code="TIMEOUT",
                message=f"Request timed out after {self.config.timeout_seconds:g}s",
                details={"type": type(exc).__name__},
                status_code=0,
            ) from exc
        except requests.RequestException as exc:
            self._record(operation, started, "transport_error", 0)
            logger.warning("api_transport_error", extra={"operation": operation, "error_type": type(exc).__name__})
            raise TransportError(
                code="TRANSPORT_ERROR",
                message=str(exc),
                details={"type": type(exc).__name__},
                status_code=0,
            ) from exc

        for interceptor in self.response_interceptors or []:
            interceptor(response)

        if 200 <= response.status_code < 300:
            self._record(operation, started, "success", response.status_code)
            logger.info(
                "api_response",
                extra={
                    "method": context.method,
                    "path": context.path,
                    "status_code": response.status_code,
                    "duration_ms": self.last_operation.duration_ms if self.last_operation else None,
                },
            )
            return response

        self._record(operation, started, "error", response.status_code)
        payload = _safe_json(response)
        if not isinstance(payload, dict):
            payload = {}
        logger.warning(
            "api_error",
            extra={"method": context.method, "path": context.path, "status_code": response.status_code},
        )
        raise map_error(response.status_code, payload, fallback_message)

    def _record(self, operation: str, started: float, result: str, status_code: int) -> None:
        self.last_operation = LastOperation(
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            status_code=status_code,
        )
