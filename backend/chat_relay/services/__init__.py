"""
Services layer for message relay.
This module separates history storage, live fan-out, and outbound
webhook delivery from the HTTP and WebSocket transports.
"""

from .message_store import MessageStore
from .broadcast_registry import BroadcastRegistry, QueueSink, Sink
from .relay_service import RelayService, Subscription
from .webhook_dispatcher import WebhookDispatcher, DeliveryResult
from .errors import (
    RelayError,
    RelayValidationError,
    PayloadTooLargeError,
    UnauthorizedError,
    WebhookDeliveryError,
    WebhookConfigurationError,
    SinkWriteError,
    SinkClosedError,
    SinkOverflowError,
)

__all__ = [
    "MessageStore",
    "BroadcastRegistry",
    "QueueSink",
    "Sink",
    "RelayService",
    "Subscription",
    "WebhookDispatcher",
    "DeliveryResult",
    "RelayError",
    "RelayValidationError",
    "PayloadTooLargeError",
    "UnauthorizedError",
    "WebhookDeliveryError",
    "WebhookConfigurationError",
    "SinkWriteError",
    "SinkClosedError",
    "SinkOverflowError",
]
