from __future__ import annotations

import time
from collections.abc import Callable

DEFAULT_THRESHOLD_SECONDS = 300.0


class StalenessGate:
    """Decides whether a focus event should refetch.

    Fresh means populated at least once and fetched less than
    ``threshold_seconds`` ago. Manual refreshes bypass the gate.
    """

    def __init__(
        self,
        threshold_seconds: float = DEFAULT_THRESHOLD_SECONDS,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.threshold_seconds = threshold_seconds
        self._now = now or time.time
        self.last_fetch: float | None = None

    def should_fetch(self) -> bool:
        if self.last_fetch is None:
            return True
        return self._now() - self.last_fetch >= self.threshold_seconds

    def mark_fetched(self) -> None:
        self.last_fetch = self._now()

    def reset(self) -> None:
        self.last_fetch = None
