"""Tests for the HTTP surface driving a session."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import COMMENT_URL, MATCH_URL, FakeDandanplay
from danmaku.core.config import DevSettings
from danmaku.main import create_app


@pytest.fixture
def settings() -> DevSettings:
    return DevSettings(
        DANDANPLAY_MATCH_URL=MATCH_URL,
        DANDANPLAY_COMMENT_URL=COMMENT_URL,
        LOG_JSON=False,
        DEFAULT_LOCALE="zh",
    )


@pytest.fixture
def fake() -> FakeDandanplay:
    return FakeDandanplay()


@pytest.fixture
def client(settings, fake):
    app = create_app(settings, transport=fake.transport())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def media_file(tmp_path):
    path = tmp_path / "X - 01.mkv"
    path.write_bytes(b"\x00\x01" * 2048)
    return path


class TestSessionRoutes:
    def test_initial_status(self, client) -> None:
        resp = client.get("/v1/session")

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "idle"
        assert body["message"] == "请先选择文件"
        assert body["run_id"] == 0

    def test_choose_file_runs_pipeline(self, client, media_file, fake) -> None:
        resp = client.post("/v1/session/file", json={"path": str(media_file)})

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "ready"
        assert body["message"] == "[精确] [42] X Y -> 2 条弹幕"
        assert body["summary"] == {
            "is_exact_match": True,
            "episode_id": "42",
            "anime_title": "X",
            "episode_title": "Y",
            "comment_count": 2,
        }
        assert fake.match_requests[0].headers["User-Agent"].startswith("danmaku-matcher/")

    def test_playback_after_ready(self, client, media_file) -> None:
        client.post("/v1/session/file", json={"path": str(media_file)})

        resp = client.get("/v1/session/playback")

        assert resp.status_code == 200
        body = resp.json()
        assert body["source_url"] == media_file.resolve().as_uri()
        assert body["comments"] == [
            {"text": "first", "time": 10.0, "color": "#ff0000", "border": False, "mode": 0},
            {"text": "hello", "time": 12.5, "color": "#ffffff", "border": False, "mode": 0},
        ]

    def test_playback_not_ready(self, client) -> None:
        resp = client.get("/v1/session/playback")

        assert resp.status_code == 404
        assert resp.json()["error"] == {"code": "playback_not_ready", "message": "尚无可播放的内容。"}

    def test_missing_file_ends_in_match_failed(self, client, tmp_path, fake) -> None:
        resp = client.post("/v1/session/file", json={"path": str(tmp_path / "gone.mkv")})

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "match_failed"
        assert body["reason"].startswith("read_error")
        assert fake.requests == []

    def test_no_match(self, client, media_file, fake) -> None:
        fake.match_payload = {"errorCode": 0, "isMatched": False, "matches": []}

        body = client.post("/v1/session/file", json={"path": str(media_file)}).json()

        assert body["state"] == "match_failed"
        assert fake.comment_requests == []

    def test_reset(self, client, media_file) -> None:
        client.post("/v1/session/file", json={"path": str(media_file)})

        resp = client.delete("/v1/session")

        assert resp.json()["state"] == "idle"
        assert resp.json()["run_id"] == 2
        assert client.get("/v1/session/playback").status_code == 404

    def test_english_locale(self, client, media_file) -> None:
        client.post("/v1/session/file", json={"path": str(media_file)})

        body = client.get("/v1/session", headers={"Accept-Language": "en-US,en;q=0.9"}).json()

        assert body["message"] == "[exact] [42] X Y -> 2 comments"


class TestErrorsAndMiddleware:
    def test_invalid_body(self, client) -> None:
        resp = client.post("/v1/session/file", json={})

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "request_invalid"

    def test_unknown_route(self, client) -> None:
        resp = client.get("/v1/nope", headers={"X-Locale": "en"})

        assert resp.status_code == 404
        assert resp.json()["error"] == {"code": "not_found", "message": "Resource not found."}

    def test_request_id_is_echoed(self, client) -> None:
        resp = client.get("/v1/healthz", headers={"X-Request-ID": "req-12345678"})

        assert resp.headers["X-Request-ID"] == "req-12345678"
        assert resp.json() == {"status": "ok", "session_state": "idle"}

    def test_invalid_request_id_is_replaced(self, client) -> None:
        resp = client.get("/v1/healthz", headers={"X-Request-ID": "bad id!"})

        assert resp.headers["X-Request-ID"] != "bad id!"
        assert len(resp.headers["X-Request-ID"]) == 32

    def test_error_envelope_carries_request_id(self, client) -> None:
        resp = client.get("/v1/session/playback", headers={"X-Request-ID": "trace-abcdef01"})

        assert resp.json()["request_id"] == "trace-abcdef01"

    def test_access_log_carries_session_run(self, client, media_file, caplog) -> None:
        client.post("/v1/session/file", json={"path": str(media_file)})

        records = [r for r in caplog.records if r.getMessage() == "http_request"]

        assert records
        assert records[-1].http_path == "/v1/session/file"
        assert records[-1].session_run == 1
        assert records[-1].session_state == "ready"
