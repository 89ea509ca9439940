"""
Broadcast Registry - the live set of connected streaming sinks.
Fan-out never waits on a consumer: a sink that cannot take a message
right now is dropped and the broadcast moves on.
"""

from collections import deque
from typing import Deque, Dict, List, Optional, Protocol, Tuple
import asyncio
import logging
import threading
from uuid import uuid4

from chat_relay.models.schemas.message import Message
from chat_relay.services.errors import SinkClosedError, SinkOverflowError, SinkWriteError

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Writable endpoint of one live client connection."""

    def send(self, message: Message) -> None:
        """Enqueue without blocking; raise SinkWriteError on failure."""
        ...

    def close(self) -> None:
        ...


class QueueSink:
    """
    Sink backed by a bounded in-memory queue.

    The broadcaster fills it with ``send``; the connection handler drains
    it with ``receive``. Must be used from the event loop thread.

    A ``receive`` that times out or is cancelled leaves queued messages in place.
    """

    def __init__(self, maxsize: int = 256):
        self.maxsize = maxsize
        self._pending: Deque[Message] = deque()
        self._ready = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: Message) -> None:
        if self._closed:
            raise SinkClosedError("sink is closed")
        if len(self._pending) >= self.maxsize:
            raise SinkOverflowError(f"sink queue full ({self.maxsize} pending)")
        self._pending.append(message)
        self._ready.set()

    def close(self) -> None:
        """Mark closed and wake a pending ``receive``. Idempotent."""
        self._closed = True
        self._ready.set()

    async def receive(self, timeout: Optional[float] = None) -> Message:
        """
        Wait for the next message.

        Args:
            timeout: Optional timeout in seconds

        Returns:
            The next message in delivery order

        Raises:
            SinkClosedError: If the sink was closed and everything queued was consumed
            asyncio.TimeoutError: If nothing arrived within ``timeout``
        """
        while not self._pending:
            if self._closed:
                raise SinkClosedError("sink is closed")
            self._ready.clear()
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        return self._pending.popleft()


class BroadcastRegistry:
    """
    Thread-safe registry of live sinks.

    Mutations take a short lock; broadcasts iterate over a snapshot so
    register/unregister can happen while a broadcast is in flight.
    """

    def __init__(self):
        self._sinks: Dict[str, Sink] = {}
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._sinks)

    def __len__(self) -> int:
        return self.subscriber_count

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._sinks

    def register(self, sink: Sink) -> str:
        """
        Add a sink to the live set.

        Args:
            sink: Sink to deliver future broadcasts to

        Returns:
            Handle for ``unregister``
        """
        handle = uuid4().hex
        with self._lock:
            self._sinks[handle] = sink
            count = len(self._sinks)

        logger.info(f"Registered subscriber {handle} ({count} connected)")
        return handle

    def unregister(self, handle: str) -> bool:
        """
        Remove and close a sink. Unknown or already removed handles are ignored.

        Args:
            handle: Handle returned by ``register``

        Returns:
            True if a sink was removed
        """
        with self._lock:
            sink = self._sinks.pop(handle, None)
            count = len(self._sinks)

        if sink is None:
            return False

        sink.close()
        logger.info(f"Unregistered subscriber {handle} ({count} connected)")
        return True

    def broadcast_all(self, message: Message) -> int:
        """
        Deliver a message to every registered sink.

        Sinks whose write fails are unregistered; the others still get the message.

        Args:
            message: Finalized message to deliver

        Returns:
            Number of sinks that accepted the message
        """
        with self._lock:
            targets: List[Tuple[str, Sink]] = list(self._sinks.items())

        delivered = 0
        failed: List[str] = []

        for handle, sink in targets:
            try:
                sink.send(message)
                delivered += 1
            except SinkWriteError as e:
                logger.debug(f"Dropping subscriber {handle}: {e}")
                failed.append(handle)
            except Exception as e:
                logger.warning(f"Unexpected error writing to subscriber {handle}: {e}", exc_info=True)
                failed.append(handle)

        for handle in failed:
            self.unregister(handle)

        logger.debug(
            f"Broadcast message {message.id} to {delivered}/{len(targets)} subscribers"
        )
        return delivered

    def close_all(self) -> int:
        """Unregister and close every sink. Returns the number closed."""
        with self._lock:
            handles = list(self._sinks.keys())

        closed = sum(1 for handle in handles if self.unregister(handle))
        if closed:
            logger.info(f"Closed {closed} subscribers")
        return closed
