from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_csv_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        if raw.startswith("[") and raw.endswith("]"):
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return [str(v).strip() for v in parsed if str(v).strip()]
        parts = [p.strip() for p in raw.split(",")]
        return [p for p in parts if p]
    return [str(value).strip()]


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: Literal["dev", "prod"] = Field(default="dev", validation_alias="APP_ENV")
    app_name: str = Field(default="danmaku-matcher", validation_alias="APP_NAME")
    api_v1_prefix: str = Field(default="/v1", validation_alias="API_V1_PREFIX")

    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")

    docs_enabled: bool = Field(default=True, validation_alias="DOCS_ENABLED")

    cors_allow_origins: list[str] = Field(default_factory=list, validation_alias="CORS_ALLOW_ORIGINS")
    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "DELETE", "OPTIONS"],
        validation_alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["Content-Type", "Accept", "Accept-Language", "X-Request-ID", "X-Locale"],
        validation_alias="CORS_ALLOW_HEADERS",
    )
    cors_allow_credentials: bool = Field(default=False, validation_alias="CORS_ALLOW_CREDENTIALS")

    default_locale: Literal["zh", "en"] = Field(default="zh", validation_alias="DEFAULT_LOCALE")
    locale_header: str = Field(default="X-Locale", validation_alias="LOCALE_HEADER")

    dandanplay_match_url: str = Field(
        default="https://api.dandanplay.net/api/v2/match",
        validation_alias="DANDANPLAY_MATCH_URL",
    )
    dandanplay_comment_url: str = Field(
        default="https://api.dandanplay.net/api/v2/comment",
        validation_alias="DANDANPLAY_COMMENT_URL",
    )
    dandanplay_app_id: str | None = Field(default=None, validation_alias="DANDANPLAY_APP_ID")
    dandanplay_app_secret: SecretStr | None = Field(default=None, validation_alias="DANDANPLAY_APP_SECRET")
    http_timeout_seconds: float = Field(default=5.0, validation_alias="HTTP_TIMEOUT_SECONDS")

    honor_display_mode: bool = Field(default=False, validation_alias="DANMAKU_HONOR_DISPLAY_MODE")

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _validate_csv_lists(cls, v: Any) -> list[str]:
        return _parse_csv_list(v)

    @model_validator(mode="after")
    def _validate_ranges(self) -> "BaseAppSettings":
        if self.http_timeout_seconds <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be positive")
        if not _is_http_url(self.dandanplay_match_url):
            raise ValueError("DANDANPLAY_MATCH_URL must be an http(s) url")
        if not _is_http_url(self.dandanplay_comment_url):
            raise ValueError("DANDANPLAY_COMMENT_URL must be an http(s) url")
        if bool(self.dandanplay_app_id) != (self.dandanplay_app_secret is not None):
            raise ValueError("DANDANPLAY_APP_ID and DANDANPLAY_APP_SECRET must be set together")
        return self

    def dandanplay_auth_headers(self) -> dict[str, str]:
        if not self.dandanplay_app_id or self.dandanplay_app_secret is None:
            return {}
        return {
            "X-AppId": self.dandanplay_app_id,
            "X-AppSecret": self.dandanplay_app_secret.get_secret_value(),
        }


class DevSettings(BaseAppSettings):
    docs_enabled: bool = Field(default=True, validation_alias="DOCS_ENABLED")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")


class ProdSettings(BaseAppSettings):
    docs_enabled: bool = Field(default=False, validation_alias="DOCS_ENABLED")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_allow_origins: list[str] = Field(default_factory=list, validation_alias="CORS_ALLOW_ORIGINS")


Settings = BaseAppSettings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env = (os.getenv("APP_ENV") or "dev").strip().lower()
    if env == "prod":
        return ProdSettings()
    return DevSettings()
