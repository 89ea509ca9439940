"""WebSocket handler streaming relayed messages to a browser client."""

import json
import logging

import anyio
from fastapi import WebSocket, WebSocketDisconnect

from chat_relay.models.schemas import Message
from chat_relay.services.errors import SinkClosedError
from chat_relay.services.relay_service import RelayService, Subscription

logger = logging.getLogger(__name__)


class StreamWebSocketHandler:
    """Handle one WebSocket subscriber: replay, then live messages until disconnect."""

    def __init__(self, websocket: WebSocket, relay: RelayService):
        self.websocket = websocket
        self.relay = relay

    async def handle_connection(self):
        """
        Accept the socket and pump messages until either side stops.

        The sender and receiver run in one task group; whichever finishes
        first cancels the other, and the subscription is released on exit.
        """
        await self.websocket.accept()

        async with self.relay.subscribe() as subscription:
            logger.info(f"WebSocket client {subscription.handle} connected")

            async with anyio.create_task_group() as group:
                group.start_soon(self._send_messages, subscription, group.cancel_scope)
                group.start_soon(self._receive_commands, subscription.handle, group.cancel_scope)

            logger.info(f"WebSocket client {subscription.handle} disconnected")

    async def _send_messages(self, subscription: Subscription, scope: anyio.CancelScope):
        try:
            for message in subscription.replay:
                await self._send_message(message)

            while True:
                try:
                    message = await subscription.receive()
                except SinkClosedError:
                    break
                await self._send_message(message)

            # Server side ended the subscription; let the client reconnect.
            await self.websocket.close()
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.warning(f"WebSocket client {subscription.handle} send failed: {e}")
        finally:
            scope.cancel()

    async def _send_message(self, message: Message):
        await self.websocket.send_json({
            "type": "message",
            "data": message.model_dump(mode="json", by_alias=True),
        })

    async def _receive_commands(self, handle: str, scope: anyio.CancelScope):
        """Read client frames; only ``ping`` is understood. Stops on disconnect."""
        try:
            while True:
                data = await self.websocket.receive_text()
                try:
                    command = json.loads(data)
                except json.JSONDecodeError:
                    await self.websocket.send_json({
                        "type": "error",
                        "content": "Invalid JSON"
                    })
                    continue

                if isinstance(command, dict) and command.get("type") == "ping":
                    await self.websocket.send_json({"type": "pong"})
                else:
                    await self.websocket.send_json({
                        "type": "error",
                        "content": "Unsupported command"
                    })
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.warning(f"WebSocket client {handle} receive failed: {e}")
        finally:
            scope.cancel()
