"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/briefmark/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AnnotationConfig(BaseModel):
    """Selection capture, highlight rendering and navigation tuning."""

    context_chars: int = Field(default=50, ge=0)
    min_selection_chars: int = Field(default=3, ge=1)
    selection_debounce_ms: int = Field(default=200, ge=0)
    focus_duration_seconds: float = Field(default=2.0, gt=0)
    navigation_retry_ms: int = Field(default=300, ge=0)


class NormaliserConfig(BaseModel):
    """Content normaliser rules that are reasonable to tune per deployment."""

    significant_text_chars: int = Field(default=10, ge=0)
    image_alt_fallback: str = "Image"


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str | None = None


class AppConfig(BaseModel):
    """Application runtime configuration."""

    base_url: str = "http://localhost:8080"
    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    log_dir: Path = Path("logs")


class DevConfig(BaseModel):
    """Development and testing toggles."""

    database_echo: bool = False
    test_database_url: str | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``ANNOTATION__CONTEXT_CHARS``, ``DATABASE__URL``, ``APP__PORT``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    annotation: AnnotationConfig = AnnotationConfig()
    normaliser: NormaliserConfig = NormaliserConfig()
    database: DatabaseConfig = DatabaseConfig()
    app: AppConfig = AppConfig()
    dev: DevConfig = DevConfig()

    @model_validator(mode="after")
    def _normalise_database_urls(self) -> Settings:
        """Force the asyncpg driver onto plain ``postgresql://`` URLs."""
        self.database.url = _asyncpg_url(self.database.url)
        self.dev.test_database_url = _asyncpg_url(self.dev.test_database_url)
        return self


def _asyncpg_url(url: str | None) -> str | None:
    if url and url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url.removeprefix("postgresql://")
    return url


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
