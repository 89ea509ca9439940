"""Client configuration and health routes."""

from fastapi import APIRouter, Depends

from chat_relay.api.dependencies import get_app_settings, get_relay
from chat_relay.core.config import Settings
from chat_relay.models.schemas import ClientConfigResponse, HealthResponse
from chat_relay.services.relay_service import RelayService

router = APIRouter(tags=["system"])


@router.get("/config", response_model=ClientConfigResponse)
async def get_client_config(settings: Settings = Depends(get_app_settings)):
    """Return the event tag the client renders as assistant output."""
    return ClientConfigResponse(assistant_event=settings.assistant_event)


@router.get("/health", response_model=HealthResponse)
async def health(relay: RelayService = Depends(get_relay)):
    return HealthResponse(**relay.stats())
