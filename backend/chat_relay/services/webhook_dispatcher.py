"""
Webhook Dispatcher - forwards user text and voice to the automation backend.

Stateless: one attempt per call, bounded in total by the webhook timeout. Failures
are raised to the caller and never retried here.
"""

from dataclasses import dataclass
from typing import Any, Optional
import asyncio
import logging

import httpx

from chat_relay.core.config import Settings
from chat_relay.core.timeutils import utc_now_iso
from chat_relay.services.errors import (
    PayloadTooLargeError,
    RelayValidationError,
    WebhookConfigurationError,
    WebhookDeliveryError,
)

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME = "audio/wav"

_AUDIO_EXTENSIONS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
}


@dataclass
class DeliveryResult:
    """Outcome of a successful webhook call."""
    success: bool
    status_code: int
    audio_size: Optional[int] = None


def _audio_filename(mime_type: str) -> str:
    base = mime_type.split(";", 1)[0].strip().lower()
    return f"recording.{_AUDIO_EXTENSIONS.get(base, 'wav')}"


class WebhookDispatcher:
    """Sends outbound payloads to the configured text and voice webhooks."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            settings: Provides the endpoint URLs, timeout and audio cap
            client: Optional pre-built client (tests pass one with a mock transport)
        """
        self.text_url = settings.text_webhook_url
        self.voice_url = settings.voice_webhook_url
        self.max_audio_bytes = settings.max_audio_bytes
        self.timeout = settings.webhook_timeout

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send_text(self, text: str, client_id: str) -> DeliveryResult:
        """
        Forward a text message as JSON ``{text, clientId, timestamp}``.

        Raises:
            RelayValidationError: If text is empty
            WebhookConfigurationError: If the text webhook URL is missing or invalid
            WebhookDeliveryError: If the call fails or returns a non-success status
        """
        if not text or not text.strip():
            raise RelayValidationError("text must not be empty", details={"field": "text"})

        url = self._resolve_endpoint(self.text_url, "TEXT_WEBHOOK_URL")
        payload = {
            "text": text,
            "clientId": client_id,
            "timestamp": utc_now_iso(),
        }

        response = await self._post(url, "text", json=payload)
        logger.info(f"Text from {client_id} delivered to webhook (status={response.status_code})")
        return DeliveryResult(success=True, status_code=response.status_code)

    async def send_voice(
        self,
        audio: bytes,
        mime_type: Optional[str],
        client_id: str
    ) -> DeliveryResult:
        """
        Forward raw audio as multipart with ``clientId``, ``timestamp``, ``audioSize`` fields.

        Raises:
            RelayValidationError: If the audio payload is empty
            PayloadTooLargeError: If the payload exceeds the configured cap
            WebhookConfigurationError: If the voice webhook URL is missing or invalid
            WebhookDeliveryError: If the call fails or returns a non-success status
        """
        size = len(audio)
        if size == 0:
            raise RelayValidationError("audio payload is empty", details={"field": "audio"})
        if size > self.max_audio_bytes:
            raise PayloadTooLargeError(
                f"audio payload of {size} bytes exceeds the {self.max_audio_bytes} byte limit",
                details={"audioSize": size, "maxAudioBytes": self.max_audio_bytes},
            )

        url = self._resolve_endpoint(self.voice_url, "VOICE_WEBHOOK_URL")
        mime_type = mime_type or DEFAULT_AUDIO_MIME

        files = {"audio": (_audio_filename(mime_type), audio, mime_type)}
        data = {
            "clientId": client_id,
            "timestamp": utc_now_iso(),
            "audioSize": str(size),
        }

        response = await self._post(url, "voice", files=files, data=data)
        logger.info(
            f"Voice from {client_id} delivered to webhook "
            f"({size} bytes, status={response.status_code})"
        )
        return DeliveryResult(success=True, status_code=response.status_code, audio_size=size)

    def _resolve_endpoint(self, url: Optional[str], setting_name: str) -> httpx.URL:
        if not url:
            raise WebhookConfigurationError(f"{setting_name} not configured")

        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL:
            parsed = None

        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.host:
            logger.error(f"Invalid {setting_name}: {url}")
            raise WebhookConfigurationError(f"{setting_name} is not a valid URL")
        return parsed

    async def _post(self, url: httpx.URL, kind: str, **kwargs: Any) -> httpx.Response:
        try:
            # httpx times each phase separately; wait_for bounds the whole call
            response = await asyncio.wait_for(
                self._client.post(url, timeout=self.timeout, **kwargs),
                timeout=self.timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"{kind} webhook timed out after {self.timeout}s: {e}")
            raise WebhookDeliveryError(f"{kind} webhook timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            logger.warning(f"{kind} webhook unreachable: {e}")
            raise WebhookDeliveryError(f"{kind} webhook unreachable: {e}")

        if not response.is_success:
            logger.warning(f"{kind} webhook returned HTTP {response.status_code}")
            raise WebhookDeliveryError(
                f"{kind} webhook request failed: {response.status_code}",
                upstream_status=response.status_code,
                details={"body": response.text[:200]},
            )
        return response
