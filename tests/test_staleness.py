from __future__ import annotations

from khata_client.staleness import StalenessGate


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def test_first_focus_always_fetches() -> None:
    gate = StalenessGate(now=FakeClock())
    assert gate.should_fetch() is True


def test_fresh_within_five_minutes_then_stale() -> None:
    clock = FakeClock(1_000.0)
    gate = StalenessGate(now=clock)
    gate.mark_fetched()

    clock.now = 1_000.0 + 200.0
    assert gate.should_fetch() is False

    clock.now = 1_000.0 + 310.0
    assert gate.should_fetch() is True


def test_reset_forces_fetch() -> None:
    clock = FakeClock()
    gate = StalenessGate(threshold_seconds=60, now=clock)
    gate.mark_fetched()
    assert gate.should_fetch() is False

    gate.reset()
    assert gate.should_fetch() is True
