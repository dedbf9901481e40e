from __future__ import annotations

import pytest

from khata_client.config import DEFAULT_API_BASE_URL, ConfigError, load_config

_ENV_KEYS = (
    "KHATA_ENV",
    "KHATA_API_BASE_URL",
    "KHATA_API_BASE_URL_DEV",
    "KHATA_API_BASE_URL_STAGING",
    "KHATA_TIMEOUT_SECONDS",
    "KHATA_MAX_CONNECTIONS",
    "KHATA_VERIFY_SSL",
    "KHATA_STORE_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so teardown also removes values written by load_dotenv.
    for key in _ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_load_config_defaults_to_production_deployment() -> None:
    cfg = load_config()
    assert cfg.api_base_url == DEFAULT_API_BASE_URL
    assert cfg.timeout_seconds == 15.0
    assert cfg.env_name == "dev"
    assert cfg.verify_ssl is True
    assert cfg.store_dir is None


def test_load_config_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KHATA_ENV", "staging")
    monkeypatch.setenv("KHATA_API_BASE_URL", "https://generic.example.com")
    monkeypatch.setenv("KHATA_API_BASE_URL_STAGING", "https://staging.example.com/")
    cfg = load_config()
    assert cfg.api_base_url == "https://staging.example.com"
    assert cfg.normalized_env == "staging"


def test_load_config_reads_env_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("KHATA_API_BASE_URL=https://dotenv.example.com\nKHATA_STORE_DIR=/tmp/khata\n")
    cfg = load_config(str(env_file))
    assert cfg.api_base_url == "https://dotenv.example.com"
    assert cfg.store_dir == "/tmp/khata"


def test_load_config_rejects_non_http_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KHATA_API_BASE_URL", "ftp://files.example.com")
    with pytest.raises(ConfigError, match="KHATA_API_BASE_URL"):
        load_config()


@pytest.mark.parametrize(
    ("key", "value", "snippet"),
    [
        ("KHATA_TIMEOUT_SECONDS", "0", "KHATA_TIMEOUT_SECONDS"),
        ("KHATA_TIMEOUT_SECONDS", "abc", "KHATA_TIMEOUT_SECONDS"),
        ("KHATA_MAX_CONNECTIONS", "0", "KHATA_MAX_CONNECTIONS"),
        ("KHATA_MAX_CONNECTIONS", "abc", "KHATA_MAX_CONNECTIONS"),
    ],
)
def test_load_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch,
    key: str,
    value: str,
    snippet: str,
) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigError, match=snippet):
        load_config()


def test_verify_ssl_can_be_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KHATA_VERIFY_SSL", "false")
    assert load_config().verify_ssl is False
