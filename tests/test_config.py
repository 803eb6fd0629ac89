"""Tests for settings parsing and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from danmaku.core.config import DevSettings, ProdSettings, get_settings


class TestDefaults:
    def test_dev_defaults(self) -> None:
        settings = DevSettings()

        assert settings.dandanplay_match_url == "https://api.dandanplay.net/api/v2/match"
        assert settings.dandanplay_comment_url == "https://api.dandanplay.net/api/v2/comment"
        assert settings.http_timeout_seconds == 5.0
        assert settings.default_locale == "zh"
        assert settings.honor_display_mode is False
        assert settings.docs_enabled is True

    def test_prod_disables_docs(self) -> None:
        assert ProdSettings().docs_enabled is False

    def test_no_credentials_means_no_auth_headers(self) -> None:
        assert DevSettings().dandanplay_auth_headers() == {}


class TestParsing:
    def test_csv_origins(self) -> None:
        settings = DevSettings(CORS_ALLOW_ORIGINS="http://a.test, http://b.test,")

        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_json_list_origins(self) -> None:
        settings = DevSettings(CORS_ALLOW_ORIGINS='["http://a.test"]')

        assert settings.cors_allow_origins == ["http://a.test"]

    def test_credentials_become_headers(self) -> None:
        settings = DevSettings(DANDANPLAY_APP_ID="app", DANDANPLAY_APP_SECRET="s3cret")

        assert settings.dandanplay_auth_headers() == {"X-AppId": "app", "X-AppSecret": "s3cret"}
        assert "s3cret" not in repr(settings)

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("DANMAKU_HONOR_DISPLAY_MODE", "true")
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")

        settings = DevSettings()

        assert settings.honor_display_mode is True
        assert settings.http_timeout_seconds == 2.5


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"HTTP_TIMEOUT_SECONDS": 0},
            {"DANDANPLAY_MATCH_URL": "ftp://example.com/match"},
            {"DANDANPLAY_COMMENT_URL": "not a url"},
            {"DANDANPLAY_APP_ID": "only-id"},
            {"DEFAULT_LOCALE": "ru"},
        ],
    )
    def test_rejects_bad_values(self, overrides) -> None:
        with pytest.raises(ValidationError):
            DevSettings(**overrides)


def test_get_settings_picks_prod(monkeypatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("APP_ENV", "prod")
    try:
        assert isinstance(get_settings(), ProdSettings)
    finally:
        get_settings.cache_clear()
