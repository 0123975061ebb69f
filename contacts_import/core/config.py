"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the contacts import
middleware and the provider adapters share a consistent configuration surface.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

KNOWN_PROVIDERS = ("gmail",)


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


class GoogleSettings(BaseSettings):
    """Configuration required for the Google contacts import."""

    model_config = SettingsConfigDict(extra="ignore")

    client_id: Optional[str] = Field(None, validation_alias="GOOGLE_CLIENT_ID")
    client_secret: Optional[str] = Field(None, validation_alias="GOOGLE_CLIENT_SECRET")
    redirect_uri: Optional[AnyHttpUrl] = Field(
        None,
        validation_alias="GOOGLE_REDIRECT_URI",
        description="Absolute URL of the gmail callback path registered with Google.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("https://www.googleapis.com/auth/contacts.readonly",),
        validation_alias="GOOGLE_CONTACTS_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        return _split_csv(value)

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)


class ContactsSettings(BaseSettings):
    """Settings for the contacts import flow itself."""

    model_config = SettingsConfigDict(extra="ignore")

    mount_path: str = Field("/contacts", validation_alias="CONTACTS_MOUNT_PATH")
    session_namespace: str = Field(
        "contacts_import", validation_alias="CONTACTS_SESSION_NAMESPACE"
    )
    ssl_ca_file: Optional[Path] = Field(
        None,
        validation_alias="CONTACTS_SSL_CA_FILE",
        description="CA bundle used by provider adapters for outbound TLS verification.",
    )
    state_secret: Optional[str] = Field(
        None,
        validation_alias="CONTACTS_STATE_SECRET",
        description="When set, OAuth state tokens are HMAC signed with this secret.",
    )
    providers: Annotated[tuple[str, ...], NoDecode] = Field(
        ("gmail",), validation_alias="CONTACTS_PROVIDERS"
    )
    test_mode: bool = Field(
        False,
        validation_alias="CONTACTS_TEST_MODE",
        description="Swap real providers for canned integration test doubles.",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="CONTACTS_HTTP_TIMEOUT")
    http_retry_attempts: int = Field(2, validation_alias="CONTACTS_HTTP_RETRY_ATTEMPTS")

    @field_validator("providers", mode="before")
    @classmethod
    def _split_providers(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        providers = tuple(name.lower() for name in _split_csv(value))
        unknown = [name for name in providers if name not in KNOWN_PROVIDERS]
        if unknown:
            raise ValueError(f"Unknown contacts providers: {', '.join(unknown)}")
        return providers

    @field_validator("mount_path")
    @classmethod
    def _normalize_mount_path(cls, value: str) -> str:
        mount = value.strip("/")
        if not mount:
            raise ValueError("CONTACTS_MOUNT_PATH must not be the site root.")
        return "/" + mount


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    # .env is applied to os.environ at import so nested settings see it too.
    model_config = SettingsConfigDict(extra="ignore")

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    session_secret: str = Field(
        ...,
        validation_alias="SESSION_SECRET",
        description="Secret used to sign the session cookie.",
    )
    contacts: ContactsSettings = Field(default_factory=ContactsSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)

    @model_validator(mode="after")
    def _require_provider_credentials(self) -> "AppSettings":
        if self.contacts.test_mode:
            return self
        if "gmail" in self.contacts.providers and not self.google.is_configured():
            raise ValueError(
                "GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REDIRECT_URI "
                "are required when the gmail provider is enabled."
            )
        return self


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ContactsSettings",
    "GoogleSettings",
    "KNOWN_PROVIDERS",
    "get_settings",
]
