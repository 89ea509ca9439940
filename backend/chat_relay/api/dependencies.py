"""FastAPI dependencies resolving the per-app services."""

from fastapi import Request

from chat_relay.core.config import Settings
from chat_relay.services.relay_service import RelayService
from chat_relay.services.webhook_dispatcher import WebhookDispatcher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_relay(request: Request) -> RelayService:
    return request.app.state.relay


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher
