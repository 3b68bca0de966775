"""
Fakes for the model and webhook collaborators
"""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
from fastapi.testclient import TestClient

from chat_gateway.config import Settings
from chat_gateway.main import create_app
from chat_gateway.services.chat import ChatGateway
from chat_gateway.services.lead_forwarder import LeadForwarder

ALLOWED = ["https://widget.example.com", "example.org", "http://localhost:3000/"]
WEBHOOK_URL = "https://hooks.example.com/intake"


def make_completion(content):
    """Shape of an openai ChatCompletion, reduced to what the gateway reads."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Stand-in for AsyncOpenAI; create is an AsyncMock so calls can be counted."""

    def __init__(self, content='{"reply": "Hello!", "chips": ["Fees"]}', error=None):
        self.create = AsyncMock(return_value=make_completion(content), side_effect=error)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))


class WebhookRecorder:
    """httpx.MockTransport handler that records every outbound request."""

    def __init__(self, status_code=200, body=None, content=None, error=None):
        self.status_code = status_code
        self.body = {"result": "ok"} if body is None else body
        self.content = content
        self.error = error
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)

    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


def make_settings(**overrides) -> Settings:
    values = {
        "allowed_origins": json.dumps(ALLOWED),
        "openai_api_key": "",
        "lead_webhook_url": WEBHOOK_URL,
        "lead_webhook_token": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_client(settings: Settings, fake_openai: FakeOpenAI, webhook: WebhookRecorder) -> TestClient:
    app = create_app(
        settings,
        chat_gateway=ChatGateway(fake_openai, model=settings.openai_model),
        lead_forwarder=LeadForwarder.from_settings(settings, transport=webhook.transport),
    )
    return TestClient(app)
