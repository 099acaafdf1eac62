"""
HTTPゲートウェイ（FastAPIルーター）のテスト

- 上流クライアントは app.dependency_overrides で MockTransport 版に差し替える
- 設定値は monkeypatch で一時的に変更する
"""
import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# app モジュールをインポート可能にする
sys.path.insert(0, str(Path(__file__).parent))

from app.anilist.client import AniListClient, get_anilist_client
from app.anilist.oauth import OAuthClient, get_oauth_client
from app.core.ratelimit import RATE_LIMIT_MESSAGE, cors_rate_limit_value, limiter
from app.core.settings import settings
from app.main import app
from app.relay.proxy import RelayClient, get_relay_client

PAGE_PAYLOAD = {
    "data": {
        "Page": {
            "pageInfo": {"currentPage": 1, "hasNextPage": False, "lastPage": 1, "total": 1},
            "media": [{"id": 20, "idMal": 20, "status": "FINISHED", "coverImage": {"medium": "m"}}],
        }
    }
}


class Recorder:
    """MockTransport 用のハンドラ（リクエストを記録）"""

    def __init__(self, responder):
        self.responder = responder
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _use_graphql(responder) -> Recorder:
    recorder = Recorder(responder)
    app.dependency_overrides[get_anilist_client] = lambda: AniListClient(
        endpoint="https://graphql.test", transport=recorder.transport
    )
    return recorder


def _use_oauth(responder) -> Recorder:
    recorder = Recorder(responder)
    app.dependency_overrides[get_oauth_client] = lambda: OAuthClient(
        token_url="https://oauth.test/token",
        client_id="cid",
        client_secret="secret",
        redirect_uri="https://app.test/callback",
        transport=recorder.transport,
    )
    return recorder


def _use_relay(responder) -> Recorder:
    recorder = Recorder(responder)
    app.dependency_overrides[get_relay_client] = lambda: RelayClient(transport=recorder.transport)
    return recorder


# --- /health ---

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


# --- /api/list ---

def test_advance_search(client):
    recorder = _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    response = client.get("/api/list/advance", params={"genres": '["Action"]', "year": "2001"})

    assert response.status_code == 200
    body = response.json()
    assert body["currentPage"] == 1
    assert body["hasNextPage"] is False
    assert body["results"][0]["id"] == "20"
    assert body["results"][0]["status"] == "COMPLETED"
    assert body["results"][0]["image"] == "m"

    variables = json.loads(recorder.requests[0].content)["variables"]
    assert variables["sort"] == ["POPULARITY_DESC"]
    assert variables["genres"] == ["Action"]
    assert variables["seasonYear"] == 2001
    assert "year" not in variables


def test_advance_sort_parsing(client):
    recorder = _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    client.get("/api/list/advance", params={"sort": '["SCORE_DESC","TRENDING_DESC"]'})
    client.get("/api/list/advance", params={"sort": "not json"})

    first = json.loads(recorder.requests[0].content)["variables"]
    second = json.loads(recorder.requests[1].content)["variables"]
    assert first["sort"] == ["SCORE_DESC", "TRENDING_DESC"]
    assert second["sort"] == ["POPULARITY_DESC"]


def test_advance_genres_omitted_when_not_an_array(client):
    recorder = _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    client.get("/api/list/advance")
    client.get("/api/list/advance", params={"genres": "NONE"})

    for request in recorder.requests:
        assert "genres" not in json.loads(request.content)["variables"]


def test_advance_repeated_params_become_lists(client):
    recorder = _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    client.get("/api/list/advance?format=TV&format=MOVIE&status=RELEASING")

    variables = json.loads(recorder.requests[0].content)["variables"]
    assert variables["format"] == ["TV", "MOVIE"]
    assert variables["status"] == "RELEASING"


def test_advance_text_search(client):
    recorder = _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    response = client.get("/api/list/advance", params={"query": "bleach", "type": "MANGA"})

    assert response.status_code == 200
    document = json.loads(recorder.requests[0].content)["query"]
    assert '$search: String = "bleach"' in document
    assert "$type: MediaType = MANGA" in document


def test_advance_failure_returns_500(client):
    _use_graphql(lambda request: httpx.Response(200, json={"data": {}}))

    response = client.get("/api/list/advance")

    assert response.status_code == 500
    error = json.loads(response.json()["error"])
    assert error["kind"] == "NotFound"


def test_advance_upstream_error_detail(client):
    upstream_error = {"errors": [{"message": "Too Many Requests."}], "data": None}
    _use_graphql(lambda request: httpx.Response(429, json=upstream_error))

    response = client.get("/api/list/advance")

    assert response.status_code == 500
    error = json.loads(response.json()["error"])
    assert error["kind"] == "BadUpstream"
    assert error["detail"] == upstream_error


def test_advance_invalid_media_type_returns_500(client):
    _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    response = client.get("/api/list/advance", params={"query": "x", "type": "MOVIE"})

    assert response.status_code == 500
    assert json.loads(response.json()["error"])["kind"] == "ValueError"


def test_list_repeated_type_returns_json_500(client):
    _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    response = client.get("/api/list/trending?type=ANIME&type=MANGA")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert json.loads(response.json()["error"])["kind"] == "ValueError"


def test_list_unexpected_error_returns_json_500(client):
    def explode(request):
        raise RuntimeError("boom")

    _use_graphql(explode)

    response = client.get("/api/list/popular")

    assert response.status_code == 500
    error = json.loads(response.json()["error"])
    assert error == {"kind": "RuntimeError", "message": "boom"}


def test_unknown_list_route(client):
    response = client.get("/api/list/upcoming")

    assert response.status_code == 404
    assert response.json() == {"error": "API NOT FOUND!"}


def test_trending_list(client):
    recorder = _use_graphql(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))

    response = client.get("/api/list/trending", params={"page": "2"})

    assert response.status_code == 200
    assert response.json()["results"][0]["id"] == "20"
    assert "TRENDING_DESC" in json.loads(recorder.requests[0].content)["query"]


def test_genres_list_requires_genres(client):
    response = client.get("/api/list/genres")
    assert response.status_code == 400


def test_media_detail(client):
    _use_graphql(lambda request: httpx.Response(200, json={"data": {"Media": {"id": 1}}}))

    response = client.get("/api/media/1")

    assert response.status_code == 200
    assert response.json() == {"id": 1}


def test_media_detail_not_found(client):
    _use_graphql(lambda request: httpx.Response(200, json={"data": {"Media": None}}))

    response = client.get("/api/media/1")

    assert response.status_code == 404
    assert json.loads(response.json()["error"])["kind"] == "NotFound"


def test_media_detail_rejects_non_numeric_id(client):
    response = client.get("/api/media/abc")

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request parameters"
    assert body["details"][0]["loc"] == ["path", "media_id"]


# --- /api/exchange-token ---

def test_exchange_token_requires_code(client):
    response = client.post("/api/exchange-token", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Authorization code is required"}


def test_exchange_token_success(client):
    recorder = _use_oauth(lambda request: httpx.Response(200, json={"access_token": "tok"}))

    response = client.post("/api/exchange-token", json={"code": "abc"})

    assert response.status_code == 200
    assert response.json() == {"accessToken": "tok"}

    payload = json.loads(recorder.requests[0].content)
    assert payload == {
        "client_id": "cid",
        "client_secret": "secret",
        "code": "abc",
        "grant_type": "authorization_code",
        "redirect_uri": "https://app.test/callback",
    }
    assert str(recorder.requests[0].url) == "https://oauth.test/token"


def test_exchange_token_upstream_error(client):
    _use_oauth(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

    response = client.post("/api/exchange-token", json={"code": "abc"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to exchange token",
        "details": {"error": "invalid_grant"},
    }


def test_exchange_token_without_access_token(client):
    _use_oauth(lambda request: httpx.Response(200, json={"token_type": "Bearer"}))

    response = client.post("/api/exchange-token", json={"code": "abc"})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to exchange token"
    assert response.json()["details"] == "Access token not found in the response"


# --- /cors ---

def test_cors_requires_target(client):
    response = client.get("/cors")

    assert response.status_code == 400
    assert response.json() == {"error": "Target-URL header or url query parameter is missing"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_relays_json(client):
    recorder = _use_relay(lambda request: httpx.Response(200, json={"ok": True}))

    response = client.get("/cors", params={"url": "https%3A%2F%2Fapi.test%2Fitems%3Fq%3D1"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, PUT, PATCH, POST, DELETE"
    assert str(recorder.requests[0].url) == "https://api.test/items?q=1"
    assert "Mozilla/5.0" in recorder.requests[0].headers["user-agent"]


def test_cors_target_url_header(client):
    recorder = _use_relay(lambda request: httpx.Response(200, json=[1, 2]))

    response = client.get("/cors", headers={"Target-URL": "https://api.test/list"})

    assert response.json() == [1, 2]
    assert str(recorder.requests[0].url) == "https://api.test/list"


def test_cors_relays_upstream_status_and_text(client):
    _use_relay(lambda request: httpx.Response(404, text="<h1>missing</h1>", headers={"content-type": "text/html"}))

    response = client.get("/cors", params={"url": "https://api.test/missing"})

    assert response.status_code == 404
    assert response.text == "<h1>missing</h1>"
    assert response.headers["content-type"].startswith("text/html")


def test_cors_relays_binary_body(client):
    png = b"\x89PNG\r\n\x1a\n\x00\xff\xfe"
    _use_relay(lambda request: httpx.Response(200, content=png, headers={"content-type": "image/png"}))

    response = client.get("/cors", params={"url": "https://img.test/cover.png"})

    assert response.status_code == 200
    assert response.content == png
    assert response.headers["content-type"] == "image/png"


def test_cors_invalid_url(client):
    response = client.get("/cors", params={"url": "not a url"})

    assert response.status_code == 500
    assert response.json() == {"error": "Error in setting up the request"}


def test_cors_no_response(client):
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    _use_relay(refuse)

    response = client.get("/cors", params={"url": "https://down.test/"})

    assert response.status_code == 500
    assert response.json() == {"error": "No response received from target URL"}


def test_cors_preflight(client):
    response = client.options(
        "/cors",
        headers={"Access-Control-Request-Headers": "x-custom, authorization"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-headers"] == "x-custom, authorization"


def test_cors_preflight_from_unlisted_origin(client):
    """ブラウザのプリフライト（Origin 付き）もアプリ全体のCORS設定に弾かれない"""
    response = client.options(
        "/cors",
        headers={
            "Origin": "https://other.example",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "target-url",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-headers"] == "target-url"


def test_cors_get_from_unlisted_origin(client):
    _use_relay(lambda request: httpx.Response(200, json={"ok": True}))

    response = client.get(
        "/cors",
        headers={"Origin": "https://other.example", "Target-URL": "https://api.test/"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_api_preflight_still_checks_origin(client):
    """/cors 以外は cors_origins の設定どおり"""
    allowed = settings.cors_origins[0]
    ok = client.options(
        "/api/list/advance",
        headers={"Origin": allowed, "Access-Control-Request-Method": "GET"},
    )
    denied = client.options(
        "/api/list/advance",
        headers={"Origin": "https://other.example", "Access-Control-Request-Method": "GET"},
    )

    assert ok.status_code == 200
    assert ok.headers["access-control-allow-origin"] == allowed
    assert denied.status_code == 400


@pytest.fixture
def rate_limited(monkeypatch):
    """CORS_RATE_LIMIT を有効にして、上限を2回にする"""
    monkeypatch.setattr(limiter, "enabled", True)
    monkeypatch.setattr(settings, "rate_limit_max", 2)
    monkeypatch.setattr(settings, "rate_limit_window_sec", 60)
    limiter.reset()
    yield limiter
    limiter.reset()


def test_cors_rate_limit(client, rate_limited):
    _use_relay(lambda request: httpx.Response(200, json={}))

    statuses = [client.get("/cors", params={"url": "https://api.test/"}).status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    last = client.get("/cors", params={"url": "https://api.test/"})
    assert last.status_code == 429
    assert last.json() == {"error": RATE_LIMIT_MESSAGE}


def test_cors_rate_limit_does_not_touch_other_routes(client, rate_limited):
    for _ in range(4):
        assert client.get("/health").status_code == 200


def test_cors_without_rate_limit(client, monkeypatch):
    _use_relay(lambda request: httpx.Response(200, json={}))
    monkeypatch.setattr(limiter, "enabled", False)

    statuses = {client.get("/cors", params={"url": "https://api.test/"}).status_code for _ in range(5)}

    assert statuses == {200}


def test_cors_rate_limit_value(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_max", 100)
    monkeypatch.setattr(settings, "rate_limit_window_sec", 15 * 60)

    assert cors_rate_limit_value() == "100 per 900 seconds"


# --- フロントエンド配信 ---

def test_frontend_serves_static_and_index(client, monkeypatch, tmp_path):
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "app.js").write_text("console.log('app')", encoding="utf-8")
    (tmp_path / "index.html").write_text("<html>index</html>", encoding="utf-8")
    monkeypatch.setattr(settings, "dist_dir", str(tmp_path))

    assert client.get("/assets/app.js").text == "console.log('app')"
    assert client.get("/").text == "<html>index</html>"
    assert client.get("/anime/21").text == "<html>index</html>"


def test_frontend_without_index(client, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "dist_dir", str(tmp_path))

    response = client.get("/anime/21")

    assert response.status_code == 500
    assert response.text == "An error occurred while serving the application"


def test_frontend_directory_and_outside_paths_fall_back_to_index(client, monkeypatch, tmp_path):
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_text("<html>index</html>", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
    monkeypatch.setattr(settings, "dist_dir", str(dist))

    assert client.get("/assets").text == "<html>index</html>"
    assert client.get("/assets/missing.js").text == "<html>index</html>"
    assert client.get("/assets/..%2F..%2Fsecret.txt").text == "<html>index</html>"
