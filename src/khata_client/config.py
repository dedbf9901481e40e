from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "https://ekthaabusiness-955272392528.europe-west1.run.app"
DEFAULT_TIMEOUT_SECONDS = 15.0


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_connections: int = 10
    verify_ssl: bool = True
    store_dir: str | None = None
    app_name: str = "khata"

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override.

    The base URL falls back to the production deployment when no
    ``KHATA_API_BASE_URL`` variable is set for the active profile.
    """
    load_dotenv(env_file)

    env_name = (os.getenv("KHATA_ENV") or "dev").strip()
    env_key = env_name.upper()

    api_base_url = (
        (os.getenv(f"KHATA_API_BASE_URL_{env_key}") or "").strip()
        or (os.getenv("KHATA_API_BASE_URL") or "").strip()
        or DEFAULT_API_BASE_URL
    )
    parsed = urlparse(api_base_url)
    _validate(
        parsed.scheme in {"http", "https"} and bool(parsed.netloc),
        f"Invalid KHATA_API_BASE_URL: expected an http(s) URL, got {api_base_url!r}",
    )

    timeout_seconds = _read_float("KHATA_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
    _validate(
        timeout_seconds > 0,
        f"Invalid KHATA_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    max_connections = _read_int("KHATA_MAX_CONNECTIONS", "10")
    _validate(
        max_connections >= 1,
        f"Invalid KHATA_MAX_CONNECTIONS: expected >= 1, got {max_connections}",
    )

    verify_ssl = _coerce_bool(os.getenv("KHATA_VERIFY_SSL"), True)
    store_dir = (os.getenv("KHATA_STORE_DIR") or "").strip() or None

    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url.rstrip("/"),
        timeout_seconds=timeout_seconds,
        max_connections=max_connections,
        verify_ssl=verify_ssl,
        store_dir=store_dir,
    )
