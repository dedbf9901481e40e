from __future__ import annotations

import logging
from typing import Any

from ..exceptions import ApiError, MissingTokenError
from ..models import AuthResponse, LoginRequest, RegisterRequest
from ..session_state import SessionEventKind
from ..validation import (
    require,
    sanitize_phone_input,
    validate_business_name,
    validate_password,
    validate_phone,
)
from .base import BaseClient, parse_record

logger = logging.getLogger(__name__)


class AuthClient(BaseClient):
    def login(self, phone_number: str, password: str) -> AuthResponse:
        """Log in and persist the session.

        This is the only call that writes the token itself; a 2xx answer
        without a token is treated as a failed login.
        """
        require(validate_phone(phone_number), "phone_number")
        require(validate_password(password), "password")
        request = LoginRequest(phone_number=sanitize_phone_input(phone_number), password=password)
        data = self._request(
            "POST",
            "/api/auth/login",
            json_body=request.to_payload(),
            operation="auth.login",
            fallback_message="Login failed",
        )
        response = parse_record(data, AuthResponse, operation="auth.login")
        if not response.token:
            logger.warning("login_missing_token")
            raise MissingTokenError(
                code="MISSING_TOKEN",
                message=response.message or "Login failed: no token received",
                details=None,
                status_code=self.http.last_operation.status_code if self.http.last_operation else 200,
                raw_payload=data,
            )
        self._persist(response)
        self._publish(SessionEventKind.LOGIN)
        logger.info("login_success", extra={"business_id": response.business_id})
        return response

    def register(self, business_name: str, phone_number: str, password: str) -> AuthResponse:
        """Create the business account.

        The returned token is deliberately not stored; onboarding calls
        :meth:`complete_registration` once business setup is done.
        """
        require(validate_business_name(business_name), "business_name")
        require(validate_phone(phone_number), "phone_number")
        require(validate_password(password), "password")
        request = RegisterRequest(
            business_name=business_name.strip(),
            phone_number=sanitize_phone_input(phone_number),
            password=password,
        )
        data = self._request(
            "POST",
            "/api/auth/register",
            json_body=request.to_payload(),
            operation="auth.register",
            fallback_message="Registration failed",
        )
        response = parse_record(data, AuthResponse, operation="auth.register")
        logger.info("register_success", extra={"business_id": response.business_id})
        return response

    def complete_registration(self, response: AuthResponse) -> None:
        if not response.token:
            raise MissingTokenError(
                code="MISSING_TOKEN",
                message="Registration response carried no token",
                details=None,
                status_code=200,
                raw_payload=response.model_dump(),
            )
        self._persist(response)
        self.http.store.mark_business_setup_completed()
        self._publish(SessionEventKind.REGISTER)

    def logout(self) -> None:
        """End the session locally even when the server call fails."""
        try:
            self._request("POST", "/api/auth/logout", operation="auth.logout", fallback_message="Logout failed")
        except ApiError as exc:
            logger.warning("logout_server_call_failed", extra={"status_code": exc.status_code, "code": exc.code})
        finally:
            self.http.store.clear_session()
            self._publish(SessionEventKind.LOGOUT)

    def get_token(self) -> str | None:
        return self.http.store.token()

    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    def _persist(self, response: AuthResponse) -> None:
        user: dict[str, Any] | None = response.user or response.business
        self.http.store.save_session(response.token or "", user, response.business_id)

    def _publish(self, kind: SessionEventKind) -> None:
        if self.http.session_state is not None:
            self.http.session_state.publish(kind)
