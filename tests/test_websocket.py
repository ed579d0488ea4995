# =============================================================================
# tests/test_websocket.py - Live Selection Update Tests
# =============================================================================

from __future__ import annotations

import asyncio
import time
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from app.main import app
from app.websocket.manager import ConnectionManager


def make_token(sub):
    payload = {"sub": sub, "aud": "authenticated", "exp": int(time.time()) + 3600}
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


class TestConnectionManager:
    """Test per-user connection tracking."""

    def test_broadcast_drops_dead_connections(self):
        manager = ConnectionManager()
        alive, dead = AsyncMock(), AsyncMock()
        dead.send_json.side_effect = RuntimeError("closed")

        async def scenario():
            await manager.connect("u1", alive)
            await manager.connect("u1", dead)
            return await manager.broadcast("u1", {"type": "selection_updated"})

        sent = asyncio.run(scenario())

        assert sent == 1
        assert manager.get_connection_count("u1") == 1
        alive.send_json.assert_awaited_once_with({"type": "selection_updated"})

    def test_broadcast_to_nobody(self):
        assert asyncio.run(ConnectionManager().broadcast("u1", {})) == 0

    def test_notify_pushes_full_snapshot(self):
        manager = ConnectionManager()
        socket = AsyncMock()

        async def scenario():
            await manager.connect("u1", socket)
            manager.notify_selection_changed("u1", {"entries": [], "totals": {"subtotal": "0.00"}})
            await asyncio.sleep(0.01)

        asyncio.run(scenario())

        socket.send_json.assert_awaited_once_with(
            {"type": "selection_updated", "entries": [], "totals": {"subtotal": "0.00"}}
        )

    def test_pending_push_is_held_until_done(self):
        manager = ConnectionManager()
        socket = AsyncMock()

        async def scenario():
            await manager.connect("u1", socket)
            manager.notify_selection_changed("u1", {"entries": []})
            held = len(manager._pending)
            await asyncio.sleep(0.01)
            return held

        held = asyncio.run(scenario())

        assert held == 1
        assert manager._pending == set()
        socket.send_json.assert_awaited_once()

    def test_notify_outside_event_loop_is_silent(self):
        manager = ConnectionManager()
        manager.connections["u1"] = {AsyncMock()}

        manager.notify_selection_changed("u1", {"entries": []})


class TestSelectionSocket:
    """Test the /ws/selection endpoint."""

    def test_connect_sends_snapshot(self, shopper):
        client = TestClient(app)
        token = make_token(str(shopper.id))

        with client.websocket_connect(f"/ws/selection?token={token}") as ws:
            hello = ws.receive_json()
            ws.send_text("ping")
            pong = ws.receive_text()

        assert hello["type"] == "connected"
        assert hello["entries"] == []
        assert hello["totals"]["final_total_display"] == "₦10000.00"
        assert pong == "pong"
