"""
Relay error types.

Every caller-facing failure is one of these; the API layer renders them
as ``{"error": code, "message": ..., "details": ...}`` with ``status_code``.
Sink write failures are a separate family and never reach a caller.
"""

from typing import Any, Optional


class RelayError(Exception):
    """Base class for caller-facing relay failures."""

    status_code: int = 500
    default_code: str = "relay_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class RelayValidationError(RelayError):
    """Malformed or incomplete request; nothing was sent or stored."""

    status_code = 400
    default_code = "validation_error"


class PayloadTooLargeError(RelayError):
    """Audio payload exceeds the configured cap."""

    status_code = 413
    default_code = "payload_too_large"


class UnauthorizedError(RelayError):
    """Inbound webhook secret missing or wrong."""

    status_code = 401
    default_code = "unauthorized"


class WebhookDeliveryError(RelayError):
    """Outbound webhook unreachable, timed out, or returned a non-success status."""

    status_code = 502
    default_code = "webhook_delivery_failed"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if upstream_status is not None:
            details["upstreamStatus"] = upstream_status
        super().__init__(message, details=details or None)
        self.upstream_status = upstream_status


class WebhookConfigurationError(WebhookDeliveryError):
    """Outbound webhook URL is missing or not a usable http(s) address."""

    status_code = 500
    default_code = "webhook_not_configured"


class SinkWriteError(Exception):
    """A subscriber sink could not accept a message."""
    pass


class SinkClosedError(SinkWriteError):
    """The sink's connection is gone."""
    pass


class SinkOverflowError(SinkWriteError):
    """The sink's buffer is full; the consumer is too slow."""
    pass
