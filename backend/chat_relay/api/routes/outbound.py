"""Outbound webhook API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from chat_relay.api.dependencies import get_dispatcher
from chat_relay.models.schemas import SendTextRequest, SendTextResponse, SendVoiceResponse
from chat_relay.services.errors import PayloadTooLargeError, RelayValidationError
from chat_relay.services.webhook_dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["outbound"])


@router.post("/send-text", response_model=SendTextResponse)
async def send_text(
    request_data: SendTextRequest,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
):
    """Forward text typed in the browser to the text webhook."""
    result = await dispatcher.send_text(request_data.text, request_data.client_id)
    return SendTextResponse(webhook_status=result.status_code)


@router.post("/send-voice", response_model=SendVoiceResponse)
async def send_voice(
    audio: Optional[UploadFile] = File(None),
    client_id: str = Form("local-user", alias="clientId"),
    mime_type: Optional[str] = Form(None, alias="mimeType"),
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
):
    """
    Forward a recorded audio clip to the voice webhook.

    At most one byte past the cap is read, so oversized uploads are
    rejected without reading them into memory whole.
    """
    if audio is None:
        logger.info(f"Rejected voice upload from {client_id}: no audio file")
        raise RelayValidationError("No audio file provided", details={"field": "audio"})

    try:
        data = await audio.read(dispatcher.max_audio_bytes + 1)
    finally:
        await audio.close()

    if len(data) > dispatcher.max_audio_bytes:
        logger.info(f"Rejected voice upload from {client_id}: over {dispatcher.max_audio_bytes} bytes")
        raise PayloadTooLargeError(
            f"audio payload exceeds the {dispatcher.max_audio_bytes} byte limit",
            details={"maxAudioBytes": dispatcher.max_audio_bytes},
        )

    result = await dispatcher.send_voice(
        data,
        mime_type or audio.content_type,
        client_id,
    )
    return SendVoiceResponse(webhook_status=result.status_code, audio_size=result.audio_size)
