from __future__ import annotations

from typing import Iterable

import pytest

from datastore.factory import build_default_store
from datastore.mock_store import MockSnapshotStore
from services.telemetry import build_default_service
from settings import (
    DEFAULT_READINGS_PATH,
    ConfigInvalid,
    get_settings,
    validate_settings,
)

_REQUIRED = (
    "FIREBASE_PROJECT_ID",
    "FIREBASE_APP_ID",
    "FIREBASE_DATABASE_URL",
    "FIREBASE_API_KEY",
)


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


@pytest.fixture(autouse=True)
def clean_caches():
    caches = (get_settings, build_default_store, build_default_service)
    _clear_caches(caches)
    yield
    _clear_caches(caches)


def test_defaults_apply(monkeypatch) -> None:
    for name in ("TELEMETRY_READINGS_PATH", "SNAPSHOT_STORE_BACKEND", "PORT", "LOG_LEVEL", "CORS_ALLOW_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.readings_path == DEFAULT_READINGS_PATH
    assert settings.store_backend == "firebase"
    assert settings.port == 3000
    assert settings.log_level == "INFO"
    assert settings.cors_allow_origins == ("*",)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    store_path = tmp_path / "store.json"

    monkeypatch.setenv("TELEMETRY_READINGS_PATH", "/UsersData/device-9/readings")
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", " Mock ")
    monkeypatch.setenv("MOCK_STORE_PATH", str(store_path))
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")

    settings = get_settings()
    store = build_default_store()
    service = build_default_service()

    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.cors_allow_origins == ("https://a.example", "https://b.example")
    assert isinstance(store, MockSnapshotStore)
    assert store.persistence_path == store_path
    assert service.store is store
    assert service.readings_path == "/UsersData/device-9/readings"
    assert service.history_path == "/UsersData/device-9/readings/history"


@pytest.mark.parametrize("value", ["not-a-port", "0", "70000", ""])
def test_invalid_port_falls_back_to_default(monkeypatch, value) -> None:
    monkeypatch.setenv("PORT", value)

    assert get_settings().port == 3000


def test_unknown_backend_falls_back_to_firebase(monkeypatch) -> None:
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "postgres")

    assert get_settings().store_backend == "firebase"


def test_validate_settings_lists_every_missing_variable(monkeypatch) -> None:
    for name in _REQUIRED:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FIREBASE_APP_ID", "1:123:web:abc")
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "firebase")

    with pytest.raises(ConfigInvalid) as excinfo:
        validate_settings(get_settings())

    assert excinfo.value.missing == (
        "FIREBASE_PROJECT_ID",
        "FIREBASE_DATABASE_URL",
        "FIREBASE_API_KEY",
    )
    assert "FIREBASE_API_KEY" in str(excinfo.value)


def test_blank_required_variable_counts_as_missing(monkeypatch) -> None:
    for name in _REQUIRED:
        monkeypatch.setenv(name, "value")
    monkeypatch.setenv("FIREBASE_API_KEY", "   ")

    with pytest.raises(ConfigInvalid) as excinfo:
        validate_settings(get_settings(), "firebase")

    assert excinfo.value.missing == ("FIREBASE_API_KEY",)


def test_mock_backend_needs_no_credentials(monkeypatch) -> None:
    for name in _REQUIRED:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "mock")

    validate_settings(get_settings())


def test_firebase_store_build_fails_fast_when_incomplete(monkeypatch) -> None:
    for name in _REQUIRED:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "firebase")

    with pytest.raises(ConfigInvalid):
        build_default_store()
