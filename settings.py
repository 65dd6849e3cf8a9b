from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv


_PROJECT_ID_ENV = "FIREBASE_PROJECT_ID"
_APP_ID_ENV = "FIREBASE_APP_ID"
_DATABASE_URL_ENV = "FIREBASE_DATABASE_URL"
_API_KEY_ENV = "FIREBASE_API_KEY"
_STORAGE_BUCKET_ENV = "FIREBASE_STORAGE_BUCKET"
_AUTH_DOMAIN_ENV = "FIREBASE_AUTH_DOMAIN"
_SENDER_ID_ENV = "FIREBASE_MESSAGING_SENDER_ID"
_MEASUREMENT_ID_ENV = "FIREBASE_MEASUREMENT_ID"
_LOCATION_ID_ENV = "FIREBASE_LOCATION_ID"
_KEY_BASE64_ENV = "FIREBASE_KEY_BASE64"
_CREDENTIALS_PATH_ENV = "FIREBASE_CREDENTIALS_PATH"
_READINGS_PATH_ENV = "TELEMETRY_READINGS_PATH"
_BACKEND_ENV = "SNAPSHOT_STORE_BACKEND"
_MOCK_STORE_PATH_ENV = "MOCK_STORE_PATH"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_READINGS_PATH = "/UsersData/N5GOhtaSNhOkN2eXtA0sMhWss4I2/readings"
FIREBASE_BACKEND = "firebase"
MOCK_BACKEND = "mock"

REQUIRED_FIREBASE_ENV = (
    (_PROJECT_ID_ENV, "firebase_project_id"),
    (_APP_ID_ENV, "firebase_app_id"),
    (_DATABASE_URL_ENV, "firebase_database_url"),
    (_API_KEY_ENV, "firebase_api_key"),
)


class ConfigInvalid(RuntimeError):
    """Raised when required configuration is missing at startup."""

    def __init__(self, missing: Tuple[str, ...]) -> None:
        self.missing = missing
        super().__init__(f"Missing required configuration: {', '.join(missing)}")


@dataclass(frozen=True)
class Settings:
    firebase_project_id: Optional[str]
    firebase_app_id: Optional[str]
    firebase_database_url: Optional[str]
    firebase_api_key: Optional[str]
    firebase_storage_bucket: Optional[str]
    firebase_auth_domain: Optional[str]
    firebase_messaging_sender_id: Optional[str]
    firebase_measurement_id: Optional[str]
    firebase_location_id: Optional[str]
    firebase_key_base64: Optional[str]
    firebase_credentials_path: Optional[str]
    readings_path: str
    store_backend: str
    mock_store_path: Optional[str]
    cors_allow_origins: Tuple[str, ...]
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_backend(default: str) -> str:
    candidate = _read_str_env(_BACKEND_ENV, default).lower()
    if candidate not in {FIREBASE_BACKEND, MOCK_BACKEND}:
        return default
    return candidate


def _read_origins(default: str) -> Tuple[str, ...]:
    raw = _read_str_env(_CORS_ORIGINS_ENV, default)
    origins = tuple(item.strip() for item in raw.split(",") if item.strip())
    return origins or (default,)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings(
        firebase_project_id=_read_optional_env(_PROJECT_ID_ENV),
        firebase_app_id=_read_optional_env(_APP_ID_ENV),
        firebase_database_url=_read_optional_env(_DATABASE_URL_ENV),
        firebase_api_key=_read_optional_env(_API_KEY_ENV),
        firebase_storage_bucket=_read_optional_env(_STORAGE_BUCKET_ENV),
        firebase_auth_domain=_read_optional_env(_AUTH_DOMAIN_ENV),
        firebase_messaging_sender_id=_read_optional_env(_SENDER_ID_ENV),
        firebase_measurement_id=_read_optional_env(_MEASUREMENT_ID_ENV),
        firebase_location_id=_read_optional_env(_LOCATION_ID_ENV),
        firebase_key_base64=_read_optional_env(_KEY_BASE64_ENV),
        firebase_credentials_path=_read_optional_env(_CREDENTIALS_PATH_ENV),
        readings_path=_read_str_env(_READINGS_PATH_ENV, DEFAULT_READINGS_PATH),
        store_backend=_read_backend(FIREBASE_BACKEND),
        mock_store_path=_read_optional_env(_MOCK_STORE_PATH_ENV, "./tmp/mock_store.json"),
        cors_allow_origins=_read_origins("*"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(3000),
        log_level=_read_log_level("INFO"),
    )


def validate_settings(settings: Settings, backend: Optional[str] = None) -> None:
    """Fail fast when the selected store backend lacks required identifiers."""
    selected = settings.store_backend if backend is None else backend
    if selected != FIREBASE_BACKEND:
        return
    missing = tuple(
        env_name
        for env_name, attribute in REQUIRED_FIREBASE_ENV
        if not getattr(settings, attribute)
    )
    if missing:
        raise ConfigInvalid(missing)
