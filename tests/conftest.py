from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))

from khata_client.config import ClientConfig  # noqa: E402
from khata_client.http_client import HttpClient  # noqa: E402
from khata_client.session_state import SessionState  # noqa: E402
from khata_client.storage import MemoryStore, SessionStore  # noqa: E402

BASE_URL = "https://api.example.com"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url=BASE_URL)


@pytest.fixture
def backend() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def store(backend: MemoryStore) -> SessionStore:
    return SessionStore(backend)


@pytest.fixture
def session_state(store: SessionStore) -> SessionState:
    return SessionState(store)


@pytest.fixture
def http(config: ClientConfig, store: SessionStore, session_state: SessionState) -> HttpClient:
    return HttpClient(config=config, store=store, session_state=session_state)
