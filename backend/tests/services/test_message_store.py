"""Tests for the bounded message history."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from chat_relay.models.schemas import MessageCreate
from chat_relay.services.message_store import MessageStore


def _candidate(i: int, **overrides) -> MessageCreate:
    data = {"event": "user", "speaker": f"speaker-{i}", "text": f"message {i}"}
    data.update(overrides)
    return MessageCreate(**data)


@pytest.mark.services
class TestMessageStore:
    """Test cases for MessageStore."""

    def test_append_assigns_id_and_timestamp(self):
        """Appending a minimal candidate fills in id and timestamp."""
        store = MessageStore()

        message = store.append(MessageCreate(event="user", speaker="Alice", text="hi"))

        assert message.id
        assert message.timestamp.endswith("Z")
        assert message.event == "user"
        assert message.speaker == "Alice"
        assert message.text == "hi"
        assert store.recent(10) == [message]

    def test_append_keeps_caller_timestamp(self):
        """A caller-supplied timestamp is stored verbatim."""
        store = MessageStore()

        message = store.append(_candidate(1, timestamp="2024-01-01T00:00:00.000Z"))

        assert message.timestamp == "2024-01-01T00:00:00.000Z"

    def test_recent_orders_by_insertion_not_timestamp(self):
        """Out-of-order caller timestamps do not reorder history."""
        store = MessageStore()
        later = store.append(_candidate(1, timestamp="2030-01-01T00:00:00Z"))
        earlier = store.append(_candidate(2, timestamp="2000-01-01T00:00:00Z"))

        assert store.recent(10) == [later, earlier]

    def test_eviction_keeps_last_capacity_messages(self):
        """Appending past capacity keeps exactly the newest messages in order."""
        store = MessageStore(capacity=5)
        appended = [store.append(_candidate(i)) for i in range(12)]

        recent = store.recent(5)

        assert recent == appended[-5:]
        assert len(store) == 5
        assert store.total_appended == 12
        assert not any(m in recent for m in appended[:-5])

    def test_recent_limit_larger_than_size(self):
        """A limit beyond the current size returns the whole buffer."""
        store = MessageStore(capacity=5)
        appended = [store.append(_candidate(i)) for i in range(3)]

        assert store.recent(100) == appended

    def test_recent_returns_newest_window(self):
        """A smaller limit returns the newest messages, oldest of them first."""
        store = MessageStore(capacity=5)
        appended = [store.append(_candidate(i)) for i in range(4)]

        assert store.recent(2) == appended[2:]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_recent_non_positive_limit(self, limit):
        """Zero or negative limits return nothing."""
        store = MessageStore()
        store.append(_candidate(1))

        assert store.recent(limit) == []

    def test_recent_on_empty_store(self):
        """An empty store has no history."""
        assert MessageStore().recent(10) == []

    def test_invalid_capacity(self):
        """Capacity below one is rejected."""
        with pytest.raises(ValueError):
            MessageStore(capacity=0)

    def test_concurrent_appends(self):
        """Appends from many threads never lose updates or reuse ids."""
        store = MessageStore(capacity=100)

        with ThreadPoolExecutor(max_workers=8) as pool:
            messages = list(pool.map(lambda i: store.append(_candidate(i)), range(1000)))

        assert len({m.id for m in messages}) == 1000
        assert len(store) == 100
        assert store.total_appended == 1000
        assert len({m.id for m in store.recent(100)}) == 100

    def test_empty_message_is_permitted(self):
        """Messages without text or audio are stored."""
        store = MessageStore()

        message = store.append(MessageCreate(event="status", speaker="system"))

        assert message.text is None
        assert message.audio_ref is None
        assert store.recent(1) == [message]
