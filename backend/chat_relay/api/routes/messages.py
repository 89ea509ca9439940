"""Inbound message API routes."""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from chat_relay.api.dependencies import get_app_settings, get_relay
from chat_relay.core.config import Settings
from chat_relay.models.schemas import (
    IncomingMessageResponse,
    MessageCreate,
    MessageListResponse,
)
from chat_relay.services.errors import UnauthorizedError
from chat_relay.services.relay_service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


def _check_secret(expected: Optional[str], provided: Optional[str]) -> None:
    if not expected:
        return
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning(f"Rejected inbound message: {'wrong' if provided else 'missing'} webhook secret")
        raise UnauthorizedError("invalid or missing webhook secret")


@router.post("/incoming", response_model=IncomingMessageResponse)
async def receive_message(
    message_data: MessageCreate,
    x_webhook_secret: Optional[str] = Header(None),
    relay: RelayService = Depends(get_relay),
    settings: Settings = Depends(get_app_settings),
):
    """
    Receive a message from the automation backend.

    The message is stored in history and pushed to every connected stream.
    """
    _check_secret(settings.incoming_webhook_secret, x_webhook_secret)

    message = await relay.publish(message_data)

    return IncomingMessageResponse(message_id=message.id, message=message)


@router.get("/messages", response_model=MessageListResponse)
async def list_messages(
    limit: Optional[int] = Query(None, ge=0),
    relay: RelayService = Depends(get_relay),
):
    """List the current history window, oldest first."""
    messages = relay.history(limit)
    return MessageListResponse(messages=messages, total=len(messages))
