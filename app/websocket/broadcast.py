# =============================================================================
# app/websocket/broadcast.py - Cross-Process Broadcasting
# =============================================================================
# Provides utilities for Celery workers to publish events that get broadcast
# to WebSocket clients.
#
# Uses Redis pub/sub for cross-process communication:
# - Workers call publish_event() to send events
# - FastAPI subscribes and broadcasts to WebSocket clients
#
# Events:
#   - lint_started: A lint run began
#   - lint_progress: A rule finished (percent, rule)
#   - lint_complete: A lint run finished (summary)
#   - lint_failed: A lint run failed
# =============================================================================

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Redis channel for WebSocket events
WEBSOCKET_CHANNEL = "refcard:websocket:events"


def get_redis_client():
    """Get a Redis client for pub/sub operations."""
    import redis
    from app.config import settings
    return redis.from_url(settings.REDIS_URL)


def build_event(event_type: str, data: dict[str, Any]) -> dict[str, Any]:
    """Event payload as sent to WebSocket clients."""
    return {"type": event_type, **data}


def publish_event(card_id: str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Publish an event that will be broadcast to WebSocket clients.

    This is called from Celery workers to notify the WebSocket server
    of events that should be broadcast to connected clients.

    Args:
        card_id: The card whose watchers receive the event
        event_type: Event type (lint_started, lint_progress, ...)
        data: Event data to include

    Returns:
        bool: True if published successfully
    """
    try:
        client = get_redis_client()

        message = json.dumps({
            "card_id": card_id,
            **build_event(event_type, data),
        })

        # Publish to Redis channel
        client.publish(WEBSOCKET_CHANNEL, message)

        logger.debug(f"Published {event_type} event for card {card_id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish event: {e}")
        return False


def publish_lint_started(card_id: str, task_id: str | None, rules_total: int) -> bool:
    return publish_event(
        card_id=card_id,
        event_type="lint_started",
        data={"task_id": task_id, "rules_total": rules_total},
    )


def publish_lint_progress(
    card_id: str,
    task_id: str | None,
    percent: int,
    rule: str,
) -> bool:
    """
    Publish a lint_progress event.

    Called after each rule finishes.
    """
    return publish_event(
        card_id=card_id,
        event_type="lint_progress",
        data={"task_id": task_id, "percent": percent, "rule": rule},
    )


def publish_lint_complete(
    card_id: str,
    task_id: str | None,
    summary: dict[str, Any],
    report: dict[str, Any] | None = None,
) -> bool:
    """
    Publish a lint_complete event.

    Called when a lint run completes; `summary` is lib.report.summarize().
    `report` (LintReport.to_dict()) lets the API keep it as the card's last
    report; it is stripped before the event reaches WebSocket clients.
    """
    data = {
        "task_id": task_id,
        "status": "SUCCESS",
        "summary": summary,
    }
    if report is not None:
        data["report"] = report

    return publish_event(
        card_id=card_id,
        event_type="lint_complete",
        data=data,
    )


def publish_lint_failed(
    card_id: str,
    task_id: str | None,
    error: str,
) -> bool:
    """
    Publish a lint_failed event.

    Called when a lint run fails.
    """
    return publish_event(
        card_id=card_id,
        event_type="lint_failed",
        data={
            "task_id": task_id,
            "status": "FAILURE",
            "error": error,
        }
    )
