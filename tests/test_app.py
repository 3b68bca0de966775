"""
Tests for origin admission, CORS, health and configuration
"""
import pytest

from chat_gateway.config import DEFAULT_ALLOWED_ORIGINS

from tests.helpers import make_settings

CHAT = {"turns": [{"role": "user", "content": "hi"}]}


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["time"].endswith("Z")
    assert client.get("/health").status_code == 200


def test_request_without_origin_is_admitted(client):
    assert client.post("/chat", json=CHAT).status_code == 200


@pytest.mark.parametrize(
    "origin",
    [
        "https://widget.example.com",
        "https://widget.example.com/",
        "http://localhost:3000",
        "https://example.org",
        "example.org",
    ],
)
def test_allowed_origin_gets_cors_headers(client, origin):
    response = client.post("/chat", json=CHAT, headers={"Origin": origin})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin
    assert response.headers["access-control-allow-credentials"] == "true"


def test_blocked_origin_never_reaches_routes(client, fake_openai, webhook):
    headers = {"Origin": "https://evil.example.com"}

    chat = client.post("/chat", json=CHAT, headers=headers)
    lead = client.post("/lead", json={"name": "A", "phone": "1"}, headers=headers)

    for response in (chat, lead):
        assert response.status_code == 403
        assert response.json()["error"] == "CORS error"
    assert fake_openai.create.await_count == 0
    assert webhook.requests == []


def test_preflight_for_allowed_origin(client):
    response = client.options(
        "/chat",
        headers={
            "Origin": "https://widget.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://widget.example.com"


def test_preflight_for_blocked_origin_is_403(client):
    response = client.options(
        "/chat",
        headers={"Origin": "https://evil.example.com", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 403


@pytest.mark.parametrize("path", ["/", "/chat", "/lead", "/does-not-exist"])
@pytest.mark.parametrize(
    "headers",
    [{}, {"Access-Control-Request-Method": "POST"}],
    ids=["bare", "request-method-without-origin"],
)
def test_plain_options_returns_200_on_any_path(client, fake_openai, path, headers):
    response = client.options(path, headers=headers)
    assert response.status_code == 200
    assert fake_openai.create.await_count == 0


# ── Configuration ────────────────────────────────────────────────────────────

def test_allowed_origins_parsed_from_json():
    settings = make_settings(allowed_origins='["https://a.example", "b.example"]')
    assert settings.allowed_origins_list == ["https://a.example", "b.example"]


@pytest.mark.parametrize("raw", ["", "not json", '{"a": 1}', '["ok", 3]'])
def test_allowed_origins_fall_back_to_defaults(raw):
    assert make_settings(allowed_origins=raw).allowed_origins_list == DEFAULT_ALLOWED_ORIGINS


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("LEAD_WEBHOOK_URL", "https://hooks.example.com/x")
    monkeypatch.setenv("CHAT_HISTORY_WINDOW", "4")

    from chat_gateway.config import Settings

    settings = Settings(_env_file=None)
    assert settings.lead_webhook_url == "https://hooks.example.com/x"
    assert settings.chat_history_window == 4
    assert settings.lead_timeout_seconds == 15.0
