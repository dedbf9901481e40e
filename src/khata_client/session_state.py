from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .storage import SessionStore

logger = logging.getLogger(__name__)


class SessionEventKind(str, Enum):
    LOGIN = "login"
    REGISTER = "register"
    LOGOUT = "logout"
    INVALIDATED = "invalidated"
    CHANGED = "changed"


@dataclass(frozen=True)
class SessionEvent:
    kind: SessionEventKind
    authenticated: bool
    reason: str | None = None


SessionListener = Callable[[SessionEvent], None]


class SessionState:
    """Observable authentication state.

    Login, logout and the 401 interceptor publish here directly, so whoever
    renders authenticated vs. unauthenticated navigation subscribes instead of
    polling the store.
    """

    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._listeners: list[SessionListener] = []
        self._last_authenticated = self.is_authenticated

    @property
    def is_authenticated(self) -> bool:
        return self._store.token() is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, kind: SessionEventKind, reason: str | None = None) -> SessionEvent:
        event = SessionEvent(kind=kind, authenticated=self.is_authenticated, reason=reason)
        self._last_authenticated = event.authenticated
        logger.info("session_event", extra={"kind": kind.value, "authenticated": event.authenticated})
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("session_listener_failed", extra={"kind": kind.value})
        return event

    def recheck(self) -> SessionEvent | None:
        """Re-read the store; publish only when the authenticated flag flipped."""
        if self.is_authenticated == self._last_authenticated:
            return None
        return self.publish(SessionEventKind.CHANGED, reason="store_changed")

    def close(self) -> None:
        self._listeners.clear()
