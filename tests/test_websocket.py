# =============================================================================
# tests/test_websocket.py - WebSocket Tests
# =============================================================================
# Tests for app/websocket: connection manager, the per-card endpoint and
# the Redis publishing helpers (Redis mocked).
#
# Run with: pytest tests/test_websocket.py -v
# =============================================================================

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.websockets import WebSocketDisconnect

from app.websocket import WEBSOCKET_CHANNEL
from app.websocket.broadcast import publish_lint_complete, publish_lint_progress
from app.websocket.manager import ConnectionManager
from tests.conftest import CLEAN_CARD


def fake_socket(fail: bool = False):
    socket = MagicMock()
    socket.accept = AsyncMock()
    socket.send_json = AsyncMock(side_effect=RuntimeError("closed") if fail else None)
    return socket


# =============================================================================
# Connection Manager
# =============================================================================

class TestConnectionManager:

    def test_connect_and_broadcast(self):
        manager = ConnectionManager()
        first, second = fake_socket(), fake_socket()

        async def run():
            await manager.connect("card-1", first)
            await manager.connect("card-1", second)
            return await manager.broadcast("card-1", {"type": "lint_started"})

        assert asyncio.run(run()) == 2
        first.send_json.assert_awaited_once_with({"type": "lint_started"})
        assert manager.get_connection_count() == 2
        assert manager.get_connection_count("card-1") == 2
        assert manager.get_active_cards() == ["card-1"]

    def test_broadcast_without_watchers(self):
        assert asyncio.run(ConnectionManager().broadcast("card-1", {})) == 0

    def test_dead_connections_are_dropped(self):
        manager = ConnectionManager()
        alive, dead = fake_socket(), fake_socket(fail=True)

        async def run():
            await manager.connect("card-1", alive)
            await manager.connect("card-1", dead)
            return await manager.broadcast("card-1", {"type": "x"})

        assert asyncio.run(run()) == 1
        assert manager.get_connection_count() == 1

    def test_disconnect_twice(self):
        manager = ConnectionManager()
        socket = fake_socket()
        asyncio.run(manager.connect("card-1", socket))

        manager.disconnect("card-1", socket)
        manager.disconnect("card-1", socket)

        assert manager.get_connection_count() == 0
        assert manager.get_active_cards() == []

    def test_last_lint_event_is_kept(self):
        manager = ConnectionManager()

        async def run():
            await manager.broadcast("card-1", {"type": "lint_started", "rules_total": 10})
            await manager.broadcast("card-1", {"type": "lint_progress", "percent": 40})
            await manager.broadcast("card-1", {"type": "other"})

        asyncio.run(run())

        assert manager.get_last_event("card-1") == {"type": "lint_progress", "percent": 40}
        assert manager.get_last_event("card-2") is None

    def test_forget_card(self):
        manager = ConnectionManager()
        asyncio.run(manager.broadcast("card-1", {"type": "lint_complete"}))

        manager.forget_card("card-1")

        assert manager.get_last_event("card-1") is None


# =============================================================================
# Endpoint
# =============================================================================

class TestCardWebSocket:

    def test_connect(self, client, token, upload):
        card_id = upload(CLEAN_CARD).json()["id"]

        with client.websocket_connect(f"/ws/cards/{card_id}?token={token}") as ws:
            hello = ws.receive_json()
            ws.send_text("ping")
            pong = ws.receive_text()

            status = client.get("/ws/status").json()

        assert hello["type"] == "connected"
        assert hello["username"] == "editor"
        assert pong == "pong"
        assert status["total_connections"] == 1
        assert status["active_cards"] == [card_id]

    def test_lint_events(self, client, token, upload):
        card_id = upload(CLEAN_CARD).json()["id"]

        with client.websocket_connect(f"/ws/cards/{card_id}?token={token}") as ws:
            ws.receive_json()
            client.post(f"/api/v1/cards/{card_id}/lint", json={"select": ["RC001", "RC002"]})

            started = ws.receive_json()
            complete = ws.receive_json()

        assert started == {"type": "lint_started", "task_id": None, "rules_total": 2}
        assert complete["type"] == "lint_complete"
        assert complete["summary"]["passed"] is True

    def test_late_watcher_gets_last_event(self, client, token, upload):
        card_id = upload(CLEAN_CARD).json()["id"]
        client.post(f"/api/v1/cards/{card_id}/lint", json={"select": ["RC001"]})

        with client.websocket_connect(f"/ws/cards/{card_id}?token={token}") as ws:
            hello = ws.receive_json()

        assert hello["last_event"]["type"] == "lint_complete"
        assert hello["last_event"]["summary"]["passed"] is True

    def test_invalid_token(self, client, upload):
        card_id = upload(CLEAN_CARD).json()["id"]

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"/ws/cards/{card_id}?token=garbage"):
                pass

        assert exc_info.value.code == 4001

    def test_unknown_card(self, client, token):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(f"/ws/cards/nope?token={token}"):
                pass

        assert exc_info.value.code == 4004


# =============================================================================
# Publishing (Redis mocked)
# =============================================================================

class TestPublish:

    @pytest.fixture
    def redis_client(self):
        with patch("app.websocket.broadcast.get_redis_client") as factory:
            yield factory.return_value

    def test_progress_event(self, redis_client):
        assert publish_lint_progress("card-1", "task-1", 40, "RC004")

        channel, message = redis_client.publish.call_args.args
        assert channel == WEBSOCKET_CHANNEL
        assert json.loads(message) == {
            "card_id": "card-1",
            "type": "lint_progress",
            "task_id": "task-1",
            "percent": 40,
            "rule": "RC004",
        }

    def test_complete_event_carries_report(self, redis_client):
        publish_lint_complete("card-1", "task-1", {"total": 0}, report={"findings": []})

        message = json.loads(redis_client.publish.call_args.args[1])
        assert message["status"] == "SUCCESS"
        assert message["report"] == {"findings": []}

    def test_redis_down(self, redis_client):
        redis_client.publish.side_effect = ConnectionError("refused")

        assert publish_lint_progress("card-1", None, 10, "RC001") is False
