# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Provides live selection updates to the shopper's open tabs.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   PackageSessionService.add_listener(websocket_manager.notify_selection_changed)
# =============================================================================

from app.websocket.manager import websocket_manager

__all__ = [
    "websocket_manager",
]
