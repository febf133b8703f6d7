# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# WebSocket endpoint for real-time lint updates.
#
# Connect: ws://host/ws/cards/{card_id}?token={jwt}
#
# Events:
#   - {"type": "lint_started", "task_id": "...", "rules_total": 10}
#   - {"type": "lint_progress", "task_id": "...", "percent": 40, "rule": "RC004"}
#   - {"type": "lint_complete", "task_id": "...", "status": "SUCCESS", "summary": {...}}
#   - {"type": "lint_failed", "task_id": "...", "error": "..."}
#
# The first message is {"type": "connected", ..., "last_event": {...} | null}
# carrying the card's latest lint event, if any.
# =============================================================================

import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from app.auth import user_from_token
from app.exceptions import CardNotFoundError
from app.websocket.manager import websocket_manager
from core.services.card_service import CardService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/cards/{card_id}")
async def card_websocket(
    websocket: WebSocket,
    card_id: str,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    WebSocket endpoint for real-time lint updates on one card.

    Authentication is required via the `token` query parameter.

    Connection URL:
        ws://localhost:8000/ws/cards/{card_id}?token={jwt}

    Close codes:
        4001: Invalid token
        4004: Card not found
    """
    # 1. Verify JWT token
    try:
        user = user_from_token(token)
    except HTTPException as e:
        logger.warning(f"WebSocket auth failed: {e.detail}")
        await websocket.close(code=4001, reason="Invalid token")
        return

    # 2. Verify the card exists
    try:
        CardService.get_card(card_id)
    except CardNotFoundError:
        logger.warning(f"WebSocket: card {card_id} not found")
        await websocket.close(code=4004, reason="Card not found")
        return

    # 3. Accept connection and add to manager
    await websocket_manager.connect(card_id, websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "card_id": card_id,
            "username": user.username,
            "message": "Connected to lint updates",
            "last_event": websocket_manager.get_last_event(card_id),
        })

        # Keep connection alive and handle incoming messages
        while True:
            data = await websocket.receive_text()

            # Handle ping/pong for keepalive
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")

    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected from card {card_id}")
    finally:
        websocket_manager.disconnect(card_id, websocket)


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection statistics.

    Returns:
        dict: Connection counts and cards being watched
    """
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "active_cards": websocket_manager.get_active_cards(),
        "card_count": len(websocket_manager.get_active_cards())
    }
