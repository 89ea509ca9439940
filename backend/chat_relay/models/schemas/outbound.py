"""Schemas for outbound webhook requests and client configuration."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendTextRequest(CamelModel):
    """Schema for a text message typed by a browser client."""
    text: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)


class SendTextResponse(CamelModel):
    """Schema for the send-text response."""
    success: bool = True
    message: str = "Text sent to webhook"
    webhook_status: int


class SendVoiceResponse(CamelModel):
    """Schema for the send-voice response."""
    success: bool = True
    message: str = "Voice sent to webhook"
    webhook_status: int
    audio_size: int


class ClientConfigResponse(CamelModel):
    """Static presentation settings for the browser client."""
    assistant_event: str


class HealthResponse(CamelModel):
    ok: bool = True
    messages: int
    capacity: int
    total_appended: int
    subscribers: int
