# =============================================================================
# app/websocket/manager.py - Lint Event Fan-out
# =============================================================================
# Tracks the sockets watching each card and fans lint events out to them.
# The latest lint_* event per card is kept, so a client that connects while
# a lint is running (or just after it finished) is told where things stand.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   await websocket_manager.connect(card_id, websocket)
#   await websocket_manager.broadcast(card_id, {"type": "lint_progress", ...})
#   websocket_manager.get_last_event(card_id)   # {"type": "lint_progress", ...}
#   websocket_manager.disconnect(card_id, websocket)
# =============================================================================

import logging
from typing import Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

LINT_EVENT_PREFIX = "lint_"


class ConnectionManager:
    """
    Sockets grouped by card ID, plus the last lint event seen per card.

    Several clients may watch one card (an editor and a CI dashboard, say);
    every lint event for the card goes to all of them.
    """

    def __init__(self):
        self.connections: Dict[str, Set[WebSocket]] = {}
        self.last_events: Dict[str, dict] = {}
        self._total_connections = 0

    async def connect(self, card_id: str, websocket: WebSocket) -> None:
        """Accept the socket and start sending it the card's lint events."""
        await websocket.accept()

        self.connections.setdefault(card_id, set()).add(websocket)
        self._total_connections += 1

        logger.info(
            f"Watcher joined card {card_id} "
            f"({len(self.connections[card_id])} on card, {self._total_connections} total)"
        )

    def disconnect(self, card_id: str, websocket: WebSocket) -> None:
        """Stop tracking a socket. Safe to call twice for the same socket."""
        watchers = self.connections.get(card_id)
        if watchers is None or websocket not in watchers:
            return

        watchers.discard(websocket)
        self._total_connections -= 1
        if not watchers:
            del self.connections[card_id]

        logger.info(f"Watcher left card {card_id} ({self._total_connections} total)")

    async def broadcast(self, card_id: str, message: dict) -> int:
        """
        Send an event to every socket watching the card.

        lint_* events are remembered as the card's last event even when no
        one is watching. Sockets that fail to receive are dropped.

        Returns:
            Number of sockets the event reached
        """
        if str(message.get("type", "")).startswith(LINT_EVENT_PREFIX):
            self.last_events[card_id] = message

        watchers = list(self.connections.get(card_id, ()))
        if not watchers:
            logger.debug(f"No watchers for card {card_id}, {message.get('type')} not sent")
            return 0

        sent = 0
        for websocket in watchers:
            try:
                await websocket.send_json(message)
                sent += 1
            except Exception as e:
                logger.warning(f"Dropping watcher of card {card_id}: {e}")
                self.disconnect(card_id, websocket)

        logger.debug(f"Sent {message.get('type')} for card {card_id} to {sent}/{len(watchers)} watchers")
        return sent

    def get_last_event(self, card_id: str) -> dict | None:
        return self.last_events.get(card_id)

    def forget_card(self, card_id: str) -> None:
        """Drop the card's last event once the card is deleted."""
        self.last_events.pop(card_id, None)

    def get_connection_count(self, card_id: str | None = None) -> int:
        if card_id:
            return len(self.connections.get(card_id, set()))
        return self._total_connections

    def get_active_cards(self) -> list[str]:
        """Card IDs with at least one watcher."""
        return list(self.connections.keys())


# Global singleton instance
websocket_manager = ConnectionManager()
