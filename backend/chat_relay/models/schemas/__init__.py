"""Pydantic schemas for the relay API."""

from .message import (
    MessageBase,
    MessageCreate,
    Message,
    IncomingMessageResponse,
    MessageListResponse,
)
from .outbound import (
    SendTextRequest,
    SendTextResponse,
    SendVoiceResponse,
    ClientConfigResponse,
    HealthResponse,
)

__all__ = [
    "MessageBase",
    "MessageCreate",
    "Message",
    "IncomingMessageResponse",
    "MessageListResponse",
    "SendTextRequest",
    "SendTextResponse",
    "SendVoiceResponse",
    "ClientConfigResponse",
    "HealthResponse",
]
