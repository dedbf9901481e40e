from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Protocol, TypeVar

from .exceptions import ApiError, StorageError
from .ui_errors import UserFacingError, to_user_facing_error
from .validation import ClientValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors a failed commit may raise; anything else is a programming error and propagates.
RECOVERABLE_ERRORS = (ApiError, ClientValidationError, StorageError)


class MutationState(str, Enum):
    IDLE = "idle"
    APPLYING = "applying"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class RollbackStrategy(Protocol[T]):
    def rollback(self, apply: Callable[[T], None], previous: T) -> None: ...


class RestorePrevious:
    """Write the captured value back into local state."""

    def rollback(self, apply: Callable[[T], None], previous: T) -> None:
        apply(previous)


@dataclass
class ReloadFromServer:
    """Discard local state by reloading everything from the backend."""

    reload: Callable[[], object]

    def rollback(self, apply: Callable[[T], None], previous: T) -> None:
        try:
            self.reload()
        except RECOVERABLE_ERRORS:
            # The reload failing leaves the optimistic value on screen; fall back to the captured one.
            logger.warning("optimistic_reload_failed", exc_info=True)
            apply(previous)


@dataclass(frozen=True)
class MutationOutcome(Generic[T]):
    state: MutationState
    value: T
    error: UserFacingError | None = None

    @property
    def ok(self) -> bool:
        return self.state == MutationState.CONFIRMED


@dataclass
class OptimisticMutation(Generic[T]):
    """Apply locally, commit remotely, roll back on failure.

    ``run`` never raises the commit error: the caller gets a
    ``MutationOutcome`` and ``on_error`` receives the user-facing message.
    """

    apply: Callable[[T], None]
    commit: Callable[[T], object]
    strategy: RollbackStrategy = field(default_factory=RestorePrevious)
    on_error: Callable[[UserFacingError], None] | None = None
    fallback_message: str = "Update failed"
    state: MutationState = field(default=MutationState.IDLE, init=False)

    def run(self, previous: T, new_value: T) -> MutationOutcome[T]:
        self.state = MutationState.APPLYING
        self.apply(new_value)
        try:
            self.commit(new_value)
        except RECOVERABLE_ERRORS as exc:
            self.strategy.rollback(self.apply, previous)
            self.state = MutationState.ROLLED_BACK
            error = to_user_facing_error(exc, fallback=self.fallback_message)
            logger.info("optimistic_rolled_back", extra={"reason": error.message})
            if self.on_error is not None:
                self.on_error(error)
            return MutationOutcome(state=self.state, value=previous, error=error)
        self.state = MutationState.CONFIRMED
        return MutationOutcome(state=self.state, value=new_value)


@dataclass
class InFlightRegistry:
    """Serializes mutations per entity key."""

    in_flight: set[str] = field(default_factory=set)

    def begin(self, key: str) -> bool:
        if key in self.in_flight:
            return False
        self.in_flight.add(key)
        return True

    def end(self, key: str) -> None:
        self.in_flight.discard(key)

    def is_busy(self, key: str) -> bool:
        return key in self.in_flight
