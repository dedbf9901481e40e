from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from platformdirs import user_data_dir

from .exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageKey:
    AUTH_TOKEN = "authToken"
    USER_DATA = "userData"
    BUSINESS_ID = "businessId"
    PRODUCTS_CACHE = "products_cache"
    BUSINESS_SETUP_COMPLETED = "business_setup_completed"


SESSION_KEYS = (StorageKey.AUTH_TOKEN, StorageKey.USER_DATA, StorageKey.BUSINESS_ID)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


@dataclass
class MemoryStore:
    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


@dataclass
class JsonFileStore:
    """All keys in one JSON document, readable only by the current user."""

    app_name: str = "khata"
    filename: str = "storage.json"
    directory: str | None = None

    def _path(self) -> Path:
        base = Path(self.directory) if self.directory else Path(user_data_dir(self.app_name, "Khata"))
        try:
            base.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create store directory {base}: {exc}") from exc
        return base / self.filename

    def _read(self) -> dict[str, str]:
        path = self._path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("storage_corrupt_discarded", extra={"path": str(path)})
            path.unlink(missing_ok=True)
            return {}
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        path = self._path()
        try:
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


@dataclass
class SessionStore:
    """Failure-tolerant facade over a key-value backend.

    Reads that fail are reported as absent. Writes and removals that fail are
    logged and otherwise ignored, so the operation that triggered them still
    succeeds. Multi-key updates are sequential with no rollback.
    """

    backend: KeyValueStore

    def get(self, key: str) -> str | None:
        try:
            return self.backend.get(key)
        except (StorageError, OSError):
            logger.warning("storage_read_failed", extra={"key": key}, exc_info=True)
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            self.backend.set(key, value)
        except (StorageError, OSError):
            logger.error("storage_write_failed", extra={"key": key}, exc_info=True)
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.backend.remove(key)
        except (StorageError, OSError):
            logger.error("storage_remove_failed", extra={"key": key}, exc_info=True)
            return False
        return True

    def get_json(self, key: str) -> Any | None:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("storage_json_invalid", extra={"key": key})
            return None

    def set_json(self, key: str, value: Any) -> bool:
        return self.set(key, json.dumps(value, default=str))

    def token(self) -> str | None:
        return self.get(StorageKey.AUTH_TOKEN) or None

    def user_data(self) -> dict[str, Any] | None:
        data = self.get_json(StorageKey.USER_DATA)
        return data if isinstance(data, dict) else None

    def save_session(self, token: str, user: dict[str, Any] | None, business_id: str | None = None) -> None:
        self.set(StorageKey.AUTH_TOKEN, token)
        if user is not None:
            self.set_json(StorageKey.USER_DATA, user)
        if business_id:
            self.set(StorageKey.BUSINESS_ID, business_id)

    def clear_session(self) -> None:
        for key in SESSION_KEYS:
            self.remove(key)

    def business_setup_completed(self) -> bool:
        return self.get(StorageKey.BUSINESS_SETUP_COMPLETED) == "true"

    def mark_business_setup_completed(self) -> None:
        self.set(StorageKey.BUSINESS_SETUP_COMPLETED, "true")
