"""
Pytest configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient

from chat_gateway.config import Settings

from tests.helpers import FakeOpenAI, WebhookRecorder, make_client, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def webhook() -> WebhookRecorder:
    return WebhookRecorder()


@pytest.fixture
def client(settings, fake_openai, webhook) -> TestClient:
    """Test client wired to the fake model and the recording webhook."""
    return make_client(settings, fake_openai, webhook)
