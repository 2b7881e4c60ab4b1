"""Centralised application configuration.

Settings are loaded from environment variables or the `.env` file in the
project root. Using pydantic's BaseSettings provides convenient parsing
and type checking. Routers and collaborators instantiate their own
Settings when they are built; nothing here is mutated at runtime.

Per-tenant values that operators rotate (the Gemini API key and the
preferred model) are NOT environment settings: they live in the Firestore
settings document and are re-read on every request.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.model_catalog import DEFAULT_MODEL, MODEL_ALIASES, MODEL_PREFIX


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Gemini
    gemini_default_model: str = Field(
        default=DEFAULT_MODEL,
        validation_alias=AliasChoices(
            "GEMINI_DEFAULT_MODEL", "GEMINI_MODEL", "gemini_default_model"
        ),
    )
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias=AliasChoices("GEMINI_API_BASE", "gemini_api_base"),
    )
    gemini_timeout_seconds: float = Field(
        default=60.0,
        validation_alias=AliasChoices(
            "GEMINI_TIMEOUT_SECONDS", "gemini_timeout_seconds"
        ),
    )
    # Manual text beyond this many characters is cut before prompting
    manual_max_chars: int = Field(
        default=100_000,
        validation_alias=AliasChoices("MANUAL_MAX_CHARS", "manual_max_chars"),
    )

    # Firestore settings document ({collection}/{document})
    settings_collection: str = Field(
        default="settings",
        validation_alias=AliasChoices("SETTINGS_COLLECTION", "settings_collection"),
    )
    settings_document: str = Field(
        default="gemini",
        validation_alias=AliasChoices("SETTINGS_DOCUMENT", "settings_document"),
    )

    # Firebase / identity
    firebase_project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "FIREBASE_PROJECT_ID", "GOOGLE_CLOUD_PROJECT", "firebase_project_id"
        ),
    )
    firebase_web_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FIREBASE_WEB_API_KEY", "firebase_web_api_key"),
    )
    identity_toolkit_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        validation_alias=AliasChoices("IDENTITY_TOOLKIT_URL", "identity_toolkit_url"),
    )
    auth_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices("AUTH_TIMEOUT_SECONDS", "auth_timeout_seconds"),
    )
    session_cookie_name: str = Field(
        default="__session",
        validation_alias=AliasChoices("SESSION_COOKIE_NAME", "session_cookie_name"),
    )
    session_cookie_days: int = Field(
        default=5,
        validation_alias=AliasChoices("SESSION_COOKIE_DAYS", "session_cookie_days"),
    )

    # Client/CORS (comma-separated origins)
    app_origins: str | None = Field(
        default=None, validation_alias=AliasChoices("APP_ORIGINS", "app_origins")
    )

    # Logging/observability
    langfuse_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("LANGFUSE_ENABLED", "langfuse_enabled"),
    )
    langfuse_host: str = Field(
        default="", validation_alias=AliasChoices("LANGFUSE_HOST", "langfuse_host")
    )
    langfuse_public_key: str = Field(
        default="",
        validation_alias=AliasChoices("LANGFUSE_PUBLIC_KEY", "langfuse_public_key"),
    )
    langfuse_secret_key: str = Field(
        default="",
        validation_alias=AliasChoices("LANGFUSE_SECRET_KEY", "langfuse_secret_key"),
    )
    tracing_backend: str = Field(
        default="langfuse",
        validation_alias=AliasChoices("TRACING_BACKEND", "tracing_backend"),
    )
    trace_name: str = Field(
        default="manual-assistant",
        validation_alias=AliasChoices("TRACE_NAME", "trace_name"),
    )
    log_level: str = Field(
        default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level")
    )

    @field_validator("gemini_default_model")
    @classmethod
    def _default_model_is_canonical(cls, value: str) -> str:
        value = (value or "").strip()
        if not value.startswith(MODEL_PREFIX):
            raise ValueError(
                f"default model must start with {MODEL_PREFIX!r}, got {value!r}"
            )
        if value in MODEL_ALIASES:
            raise ValueError(
                f"default model {value!r} is a deprecated alias; "
                f"use {MODEL_ALIASES[value]!r}"
            )
        return value

    def cors_origins(self) -> list[str]:
        """Return the configured CORS origins, stripped of trailing slashes."""
        raw = self.app_origins or ""
        return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]
