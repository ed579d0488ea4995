# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# WebSocket endpoint for live selection totals.
#
# Connect: ws://host/ws/selection?token={jwt}
#
# Events:
#   - {"type": "connected", ...current snapshot}
#   - {"type": "selection_updated", "entries": [...], "totals": {...}, ...}
# =============================================================================

import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from jose import JWTError

from app.auth.dependencies import decode_access_token
from app.websocket.manager import websocket_manager
from core.services.package_service import PackageSessionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/selection")
async def selection_websocket(
    websocket: WebSocket,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    WebSocket endpoint for live selection updates.

    Authentication is required via the `token` query parameter. On connect
    the current snapshot is sent; after that, every selection change made
    through the API is pushed as a full snapshot.
    """
    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.warning(f"WebSocket auth failed: {e}")
        await websocket.close(code=4001, reason="Invalid token")
        return

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("WebSocket auth failed: missing user ID in token")
        await websocket.close(code=4001, reason="Invalid token: missing user ID")
        return

    await websocket_manager.connect(user_id, websocket)

    try:
        snapshot = PackageSessionService.get_state(user_id).snapshot()
        await websocket.send_json({"type": "connected", **snapshot})

        while True:
            data = await websocket.receive_text()

            # Handle ping/pong for keepalive
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")

    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected for user {user_id}")
    finally:
        websocket_manager.disconnect(user_id, websocket)


@router.get("/ws/status")
async def websocket_status():
    """Get WebSocket connection statistics."""
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "active_users": len(websocket_manager.connections),
    }
