from __future__ import annotations

from khata_client.session_state import SessionEvent, SessionEventKind, SessionState
from khata_client.storage import SessionStore, StorageKey


def test_subscribe_receives_published_events(store: SessionStore) -> None:
    state = SessionState(store)
    events: list[SessionEvent] = []
    state.subscribe(events.append)

    store.set(StorageKey.AUTH_TOKEN, "tok")
    state.publish(SessionEventKind.LOGIN)

    assert events == [SessionEvent(kind=SessionEventKind.LOGIN, authenticated=True)]


def test_unsubscribe_and_close_remove_listeners(store: SessionStore) -> None:
    state = SessionState(store)
    unsubscribe = state.subscribe(lambda event: None)
    state.subscribe(lambda event: None)
    assert state.listener_count == 2

    unsubscribe()
    unsubscribe()
    assert state.listener_count == 1

    state.close()
    assert state.listener_count == 0


def test_failing_listener_does_not_block_others(store: SessionStore) -> None:
    state = SessionState(store)
    seen: list[SessionEventKind] = []

    def _boom(event: SessionEvent) -> None:
        raise RuntimeError("listener bug")

    state.subscribe(_boom)
    state.subscribe(lambda event: seen.append(event.kind))

    state.publish(SessionEventKind.LOGOUT)
    assert seen == [SessionEventKind.LOGOUT]


def test_recheck_publishes_only_on_change(store: SessionStore) -> None:
    state = SessionState(store)
    events: list[SessionEvent] = []
    state.subscribe(events.append)

    assert state.recheck() is None

    store.set(StorageKey.AUTH_TOKEN, "tok")
    event = state.recheck()
    assert event is not None
    assert event.kind == SessionEventKind.CHANGED
    assert event.authenticated is True

    assert state.recheck() is None
    assert len(events) == 1
