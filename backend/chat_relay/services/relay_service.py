"""
Relay Service - coordinates the message store and the broadcast registry.

Publishing and subscribing share one lock, so a new subscriber's replay
snapshot and its first live message are adjacent: nothing appended around
the connect is lost, and nothing is delivered twice.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional
import asyncio
import logging

from chat_relay.models.schemas.message import Message, MessageCreate
from chat_relay.services.broadcast_registry import BroadcastRegistry, QueueSink
from chat_relay.services.message_store import MessageStore

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """A connected subscriber: its replay burst plus the live feed."""
    handle: str
    sink: QueueSink
    replay: List[Message] = field(default_factory=list)

    async def receive(self, timeout: Optional[float] = None) -> Message:
        """Next live message; see :meth:`QueueSink.receive`."""
        return await self.sink.receive(timeout=timeout)

    @property
    def closed(self) -> bool:
        return self.sink.closed


class RelayService:
    """
    Store-then-broadcast on publish, snapshot-and-register on subscribe.
    """

    def __init__(
        self,
        store: MessageStore,
        registry: BroadcastRegistry,
        queue_size: int = 256
    ):
        """
        Initialize the relay with its shared state.

        Args:
            store: Ring buffer holding recent history
            registry: Live sink set
            queue_size: Per-subscriber buffer before a slow consumer is dropped
        """
        self.store = store
        self.registry = registry
        self.queue_size = queue_size
        self._lock = asyncio.Lock()

        logger.info("RelayService initialized")

    async def publish(self, candidate: MessageCreate) -> Message:
        """
        Store a message and fan it out to every live subscriber.

        Args:
            candidate: Validated inbound message

        Returns:
            The finalized message with id and timestamp assigned
        """
        async with self._lock:
            message = self.store.append(candidate)
            delivered = self.registry.broadcast_all(message)

        logger.info(
            f"Published message {message.id} (event={message.event}) to {delivered} subscribers"
        )
        return message

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[Subscription]:
        """
        Connect a new subscriber for the duration of the ``async with`` block.

        Yields:
            Subscription whose ``replay`` holds current history and whose
            ``receive`` returns every message published afterwards
        """
        sink = QueueSink(maxsize=self.queue_size)

        async with self._lock:
            replay = self.store.recent(self.store.capacity)
            handle = self.registry.register(sink)

        logger.debug(f"Subscriber {handle} replaying {len(replay)} messages")

        try:
            yield Subscription(handle=handle, sink=sink, replay=replay)
        finally:
            self.registry.unregister(handle)

    def history(self, limit: Optional[int] = None) -> List[Message]:
        """Current history window, oldest first."""
        return self.store.recent(self.store.capacity if limit is None else limit)

    def stats(self) -> dict:
        return {
            "messages": len(self.store),
            "capacity": self.store.capacity,
            "total_appended": self.store.total_appended,
            "subscribers": self.registry.subscriber_count,
        }

    def shutdown(self) -> int:
        """Close every live subscriber so open streams end."""
        return self.registry.close_all()
