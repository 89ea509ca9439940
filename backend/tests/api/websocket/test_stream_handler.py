"""Tests for the WebSocket stream transport."""

import pytest
from fastapi.testclient import TestClient


@pytest.mark.api
class TestStreamWebSocket:
    """Test cases for /api/ws."""

    def test_replay_then_live(self, app, message_payload):
        """A socket receives stored history, then messages posted while connected."""
        with TestClient(app) as client:
            first = client.post("/api/incoming", json=message_payload).json()["message"]

            with client.websocket_connect("/api/ws") as websocket:
                replayed = websocket.receive_json()
                assert replayed == {"type": "message", "data": first}

                second = client.post(
                    "/api/incoming",
                    json={"event": "Control", "speaker": "Bot", "text": "reply"},
                ).json()["message"]

                live = websocket.receive_json()
                assert live == {"type": "message", "data": second}

    def test_ping(self, app):
        with TestClient(app) as client:
            with client.websocket_connect("/api/ws") as websocket:
                websocket.send_json({"type": "ping"})
                assert websocket.receive_json() == {"type": "pong"}

                websocket.send_text("not json")
                assert websocket.receive_json() == {"type": "error", "content": "Invalid JSON"}

    def test_disconnect_unsubscribes(self, app):
        with TestClient(app) as client:
            with client.websocket_connect("/api/ws") as websocket:
                websocket.send_json({"type": "ping"})
                websocket.receive_json()
                assert client.get("/api/health").json()["subscribers"] == 1

            # The server notices the close on its next receive
            for _ in range(50):
                if client.get("/api/health").json()["subscribers"] == 0:
                    break
            assert client.get("/api/health").json()["subscribers"] == 0

    def test_client_close_releases_subscription_cleanly(self, app, caplog):
        """Closing right after a ping ends both loops without stray task errors."""
        with TestClient(app) as client:
            for _ in range(3):
                with client.websocket_connect("/api/ws") as websocket:
                    websocket.send_json({"type": "ping"})
                    assert websocket.receive_json() == {"type": "pong"}

            for _ in range(50):
                if client.get("/api/health").json()["subscribers"] == 0:
                    break
            assert client.get("/api/health").json()["subscribers"] == 0

        assert not [r for r in caplog.records if r.name == "asyncio" and r.levelname == "ERROR"]
