"""HTTP routers, mounted under ``/api``."""

from .messages import router as messages_router
from .outbound import router as outbound_router
from .stream import router as stream_router
from .system import router as system_router

__all__ = ["messages_router", "outbound_router", "stream_router", "system_router"]
