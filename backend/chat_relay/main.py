"""FastAPI application relaying chat messages between browsers and webhooks."""

import argparse
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_relay import __version__
from chat_relay.api.routes import (
    messages_router,
    outbound_router,
    stream_router,
    system_router,
)
from chat_relay.api.websocket.stream_handler import StreamWebSocketHandler
from chat_relay.core.config import Settings, get_settings
from chat_relay.core.logging_config import configure_logging
from chat_relay.services.broadcast_registry import BroadcastRegistry
from chat_relay.services.errors import RelayError
from chat_relay.services.message_store import MessageStore
from chat_relay.services.relay_service import RelayService
from chat_relay.services.webhook_dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[WebhookDispatcher] = None,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Explicit settings; defaults to the environment-derived instance
        dispatcher: Optional pre-built webhook dispatcher (tests inject one)

    Returns:
        Configured FastAPI app with its services on ``app.state``
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    store = MessageStore(capacity=settings.history_capacity)
    registry = BroadcastRegistry()
    relay = RelayService(store, registry, queue_size=settings.subscriber_queue_size)
    dispatcher = dispatcher or WebhookDispatcher(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Relay starting (capacity={settings.history_capacity}, "
            f"assistant_event={settings.assistant_event!r})"
        )
        yield
        closed = relay.shutdown()
        await dispatcher.aclose()
        logger.info(f"Relay stopped, {closed} subscribers closed")

    app = FastAPI(title="Chat Relay", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.relay = relay
    app.state.dispatcher = dispatcher

    origins = settings.cors_origins_list or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials only for an explicit origin list, never with the wildcard
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RelayError, relay_error_handler)

    app.include_router(messages_router, prefix="/api")
    app.include_router(stream_router, prefix="/api")
    app.include_router(outbound_router, prefix="/api")
    app.include_router(system_router, prefix="/api")

    @app.websocket("/api/ws")
    async def websocket_stream(websocket: WebSocket):
        handler = StreamWebSocketHandler(websocket, relay)
        await handler.handle_connection()

    return app


def run() -> None:
    """Console entry point: run the relay under uvicorn."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the chat relay server.")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    if args.reload:
        uvicorn.run(
            "chat_relay.main:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=True,
            log_level=args.log_level.lower(),
        )
        return

    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    run()
