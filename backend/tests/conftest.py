"""Shared fixtures for relay tests."""

import json

import httpx
import pytest

from chat_relay.core.config import Settings
from chat_relay.main import create_app
from chat_relay.services.broadcast_registry import BroadcastRegistry
from chat_relay.services.message_store import MessageStore
from chat_relay.services.relay_service import RelayService
from chat_relay.services.webhook_dispatcher import WebhookDispatcher

TEXT_URL = "http://hooks.test/text"
VOICE_URL = "http://hooks.test/voice"


class RecordingWebhook:
    """Mock transport handler that records every outbound request."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="ok" if self.status_code < 400 else "upstream failure")

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings():
    """Settings with webhook endpoints pointed at the mock transport."""
    return Settings(
        _env_file=None,
        text_webhook_url=TEXT_URL,
        voice_webhook_url=VOICE_URL,
        history_capacity=100,
        max_audio_bytes=10 * 1024 * 1024,
        subscriber_queue_size=16,
        stream_heartbeat_interval=0.05,
    )


@pytest.fixture
def store():
    return MessageStore(capacity=5)


@pytest.fixture
def registry():
    return BroadcastRegistry()


@pytest.fixture
def relay(store, registry):
    return RelayService(store, registry, queue_size=16)


@pytest.fixture
def webhook():
    return RecordingWebhook()


@pytest.fixture
def dispatcher(settings, webhook):
    client = httpx.AsyncClient(transport=httpx.MockTransport(webhook))
    return WebhookDispatcher(settings, client=client)


@pytest.fixture
def app(settings, dispatcher):
    """Relay app wired to the recording webhook."""
    return create_app(settings=settings, dispatcher=dispatcher)


@pytest.fixture
def message_payload():
    return {"event": "user", "speaker": "Alice", "text": "hi"}
