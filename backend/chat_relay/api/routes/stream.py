"""Server-Sent Events stream of relayed messages."""

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from chat_relay.api.dependencies import get_app_settings, get_relay
from chat_relay.core.config import Settings
from chat_relay.models.schemas import Message
from chat_relay.services.errors import SinkClosedError
from chat_relay.services.relay_service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stream"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

KEEP_ALIVE_FRAME = ": keep-alive\n\n"


def format_sse(message: Message) -> str:
    """Render one message as an SSE frame."""
    return f"id: {message.id}\ndata: {message.model_dump_json(by_alias=True)}\n\n"


async def event_stream(
    request: Request,
    relay: RelayService,
    heartbeat_interval: float,
) -> AsyncIterator[str]:
    """
    Replay history, then follow live messages until the client goes away.

    The subscription is released when the generator finishes or is closed,
    which is what Starlette does when the response is torn down.
    """
    async with relay.subscribe() as subscription:
        logger.info(f"SSE client {subscription.handle} connected")

        for message in subscription.replay:
            yield format_sse(message)

        while True:
            if await request.is_disconnected():
                break
            try:
                message = await subscription.receive(timeout=heartbeat_interval)
            except asyncio.TimeoutError:
                yield KEEP_ALIVE_FRAME
                continue
            except SinkClosedError:
                # Dropped as a slow consumer or shutting down; the browser reconnects.
                break
            yield format_sse(message)

        logger.info(f"SSE client {subscription.handle} disconnected")


@router.get("/stream")
async def stream_messages(
    request: Request,
    relay: RelayService = Depends(get_relay),
    settings: Settings = Depends(get_app_settings),
):
    """Subscribe to the message stream (text/event-stream)."""
    return StreamingResponse(
        event_stream(request, relay, settings.stream_heartbeat_interval),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
