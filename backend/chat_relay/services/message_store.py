"""
Message Store - bounded in-memory history of recent messages.
The single source of truth for what a newly connected client gets replayed.
"""

from collections import deque
from typing import Deque, List
import logging
import threading
from uuid import uuid4

from chat_relay.core.timeutils import utc_now_iso
from chat_relay.models.schemas.message import Message, MessageCreate

logger = logging.getLogger(__name__)


class MessageStore:
    """
    Append-only ring buffer of the last ``capacity`` messages.
    No persistence - history is lost when the process exits.
    """

    def __init__(self, capacity: int = 100):
        """
        Initialize the store.

        Args:
            capacity: Maximum number of messages kept; the oldest is evicted beyond it

        Raises:
            ValueError: If capacity is less than 1
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")

        self._messages: Deque[Message] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._total_appended = 0

        logger.info(f"MessageStore initialized with capacity={capacity}")

    @property
    def capacity(self) -> int:
        return self._messages.maxlen  # type: ignore[return-value]

    @property
    def total_appended(self) -> int:
        """Number of messages appended over the store's lifetime, evicted ones included."""
        return self._total_appended

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, candidate: MessageCreate) -> Message:
        """
        Finalize a candidate and insert it at the tail.

        Assigns a fresh id, and a timestamp when the caller supplied none.
        Evicts the oldest message if the buffer is full.

        Args:
            candidate: Validated inbound message

        Returns:
            The stored message
        """
        fields = candidate.model_dump(exclude={"timestamp"})
        message = Message(
            id=str(uuid4()),
            timestamp=candidate.timestamp or utc_now_iso(),
            **fields,
        )

        with self._lock:
            evicting = len(self._messages) == self._messages.maxlen
            self._messages.append(message)
            self._total_appended += 1

        logger.debug(
            f"Appended message {message.id} (event={message.event}, evicted_oldest={evicting})"
        )
        return message

    def recent(self, limit: int) -> List[Message]:
        """
        Get the most recent messages, oldest first.

        Args:
            limit: Maximum number of messages to return

        Returns:
            Up to ``limit`` messages in insertion order
        """
        if limit <= 0:
            return []

        with self._lock:
            snapshot = list(self._messages)

        return snapshot[-limit:]
