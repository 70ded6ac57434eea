from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

DEFAULT_DATABASE_URL = "https://to-do-list-8d7c1-default-rtdb.asia-southeast1.firebasedatabase.app/"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PORT: listening port (default: 5000)
    - HOST: bind address (default: 0.0.0.0)
    - STORE_BACKEND: 'firebase' (default) or 'memory'
    - FIREBASE_CREDENTIALS: path to the service account key file. Default './serviceAccountKey.json'
    - FIREBASE_DATABASE_URL: Realtime Database endpoint URL
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name (default: INFO)
    """

    port: int
    host: str
    store_backend: str
    firebase_credentials: str
    firebase_database_url: str
    cors_allow_origins: List[str]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_port(value: str, default: int = 5000) -> int:
    try:
        port = int(value.strip())
    except ValueError:
        return default
    if not (0 < port < 65536):
        return default
    return port


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("STORE_BACKEND", "firebase").strip().lower()
    if backend not in {"firebase", "memory"}:
        backend = "firebase"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        log_level = "INFO"

    return Settings(
        port=_parse_port(_get_env("PORT", "5000")),
        host=_get_env("HOST", "0.0.0.0").strip(),
        store_backend=backend,
        firebase_credentials=_get_env("FIREBASE_CREDENTIALS", "./serviceAccountKey.json").strip(),
        firebase_database_url=_get_env("FIREBASE_DATABASE_URL", DEFAULT_DATABASE_URL).strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
    )
