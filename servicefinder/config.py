"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchTuningSettings(BaseModel):
    debounce_seconds: float = Field(default=0.3, ge=0.0, le=5.0)
    max_suggestions: int = Field(default=8, ge=1, le=50)
    remote_timeout_seconds: float = Field(default=10.0, gt=0.0, le=120.0)
    history_size: int = Field(default=5, ge=0, le=50)


class ProviderStoreSettings(BaseModel):
    base_url: AnyHttpUrl | None = Field(
        default=None,
        description="REST endpoint serving provider documents; bundled data is used when unset.",
    )
    collection: str = Field(default="users", min_length=1)
    api_key: SecretStr | None = None
    request_timeout_seconds: float = Field(default=8.0, gt=0.0, le=60.0)
    max_attempts: int = Field(default=2, ge=1, le=5)

    @field_validator("base_url", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SearchSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SERVICEFINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    default_language: str = "en"

    search: SearchTuningSettings = Field(default_factory=SearchTuningSettings)
    store: ProviderStoreSettings = Field(default_factory=ProviderStoreSettings)


@lru_cache
def get_settings() -> SearchSettings:
    """Return cached settings instance."""

    return SearchSettings()


__all__ = [
    "ProviderStoreSettings",
    "SearchSettings",
    "SearchTuningSettings",
    "get_settings",
]
