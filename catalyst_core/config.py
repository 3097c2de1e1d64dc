# catalyst_core/config.py

"""
Configuration for the Catalyst Core measurement store.

Values are read from environment variables prefixed with ``CATALYST_``
(or from a local ``.env`` file) and validated by pydantic-settings.

Environment variables
=====================

- CATALYST_DATABASE_URL
    SQLAlchemy URL of the backing database.
    Default: "sqlite:///./catalyst_core.db"

- CATALYST_SQLITE_TIMEOUT
    Seconds a SQLite connection waits on a locked database before the
    operation fails with StorageUnavailable. Default: 5.0

- CATALYST_LOG_LEVEL / CATALYST_LOG_FORMAT
    Log level name and renderer ("json" or "console").

- CATALYST_API_PREFIX
    Optional URL prefix for all HTTP routes, e.g. "/api/v1".

- CATALYST_CORS_ORIGINS
    Comma-separated list of allowed CORS origins, or "*".

Typical usage
=============

    from catalyst_core.config import get_settings

    settings = get_settings()
    engine = build_engine(settings.DATABASE_URL)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Central configuration registry.
    """

    # --- Application Meta ---
    APP_NAME: str = "catalyst-core"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- Persistence ---
    DATABASE_URL: str = "sqlite:///./catalyst_core.db"
    SQL_ECHO: bool = False
    SQLITE_TIMEOUT: float = 5.0

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "catalyst-core"

    # --- HTTP ---
    API_PREFIX: str = ""
    CORS_ORIGINS: str = "*"
    ENABLE_DOCS: bool = True

    model_config = SettingsConfigDict(
        env_prefix="CATALYST_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def api_root(self) -> str:
        """Normalized API prefix: "" or "/something" without a trailing slash."""
        root = self.API_PREFIX.strip()
        if not root or root == "/":
            return ""
        if not root.startswith("/"):
            root = "/" + root
        return root.rstrip("/")

    @property
    def cors_origins(self) -> List[str]:
        raw = (self.CORS_ORIGINS or "").strip()
        if not raw or raw == "*":
            return ["*"]
        return [p.strip() for p in raw.split(",") if p.strip()]


# Singleton settings instance
_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Return the global Settings instance, creating it from the environment
    on first use.
    """
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings()
    return _SETTINGS


def set_settings(settings: Optional[Settings]) -> None:
    """
    Replace the global Settings instance.

    Mainly useful for tests; passing None forces a reload from the
    environment on the next ``get_settings()`` call.
    """
    global _SETTINGS
    _SETTINGS = settings


__all__ = ["AppEnv", "Settings", "get_settings", "set_settings"]
