from __future__ import annotations

from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_VALUES = {"", "replace-me", "changeme"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.example"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="local", alias="ENVIRONMENT")
    project_name: str = Field(default="Infra Usage", alias="PROJECT_NAME")
    version: str = Field(default="0.1.0")

    platform_api_url: str = Field(
        default="http://localhost:8080",
        alias="PLATFORM_API_URL",
        description="Base URL of the platform API serving subscriptions and infra monitoring.",
    )
    platform_api_key: SecretStr | None = Field(default=None, alias="PLATFORM_API_KEY")
    platform_timeout_seconds: float = Field(
        default=10.0,
        alias="PLATFORM_TIMEOUT_SECONDS",
        ge=1.0,
        le=60.0,
    )
    panel_fetch_timeout_seconds: float = Field(
        default=8.0,
        alias="PANEL_FETCH_TIMEOUT_SECONDS",
        ge=0.5,
        le=60.0,
        description="Metric lookups still pending after this long are reported as loading.",
    )
    display_timezone: str = Field(
        default="UTC",
        alias="DISPLAY_TIMEZONE",
        description="IANA zone used to decide what 'today' is and to format chart labels.",
    )
    dashboard_base_url: str = Field(
        default="",
        alias="DASHBOARD_BASE_URL",
        description="Prefix for upgrade links. Empty keeps them relative.",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        alias="CORS_ALLOW_ORIGINS",
        description="JSON list of browser origins allowed to call the API. Empty disables CORS.",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    sentry_dsn: SecretStr | None = Field(default=None, alias="SENTRY_DSN")
    sentry_traces_sample_rate: float = Field(
        default=0.01,
        alias="SENTRY_TRACES_SAMPLE_RATE",
        ge=0.0,
        le=1.0,
    )

    @field_validator("platform_api_url", "dashboard_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("display_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.display_timezone)

    @staticmethod
    def _is_missing(value: Any) -> bool:
        if value is None:
            return True

        if isinstance(value, SecretStr):
            value = value.get_secret_value()

        if isinstance(value, str):
            return value.strip() in PLACEHOLDER_VALUES

        return False

    @model_validator(mode="after")
    def ensure_required_secrets(self) -> "Settings":
        if self.environment != "production":
            return self

        required: dict[str, Any] = {
            "PLATFORM_API_KEY": self.platform_api_key,
        }
        missing = [name for name, value in required.items() if self._is_missing(value)]

        if missing:
            missing_csv = ", ".join(sorted(missing))
            raise ValueError(
                "Missing required secrets. Set the following environment variables with real values: "
                f"{missing_csv}."
            )

        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
