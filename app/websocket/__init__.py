# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Provides real-time updates for lint runs.
#
# Usage:
#   # Broadcast an event to all connections for a card (from FastAPI)
#   from app.websocket import websocket_manager
#
#   await websocket_manager.broadcast(card_id, {
#       "type": "lint_complete",
#       "summary": {...}
#   })
#
#   # Publish events from Celery workers
#   from app.websocket.broadcast import publish_lint_progress
#
#   publish_lint_progress(card_id, task_id, percent=40, rule="RC004")
# =============================================================================

from app.websocket.manager import websocket_manager
from app.websocket.broadcast import (
    build_event,
    publish_event,
    publish_lint_started,
    publish_lint_progress,
    publish_lint_complete,
    publish_lint_failed,
    WEBSOCKET_CHANNEL,
)

__all__ = [
    "websocket_manager",
    "build_event",
    "publish_event",
    "publish_lint_started",
    "publish_lint_progress",
    "publish_lint_complete",
    "publish_lint_failed",
    "WEBSOCKET_CHANNEL",
]
