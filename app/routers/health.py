# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from app.dependencies import SettingsDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    card_store: str
    redis: str
    workers: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Returns whether the service is ready to accept requests.
    Checks the card store, Redis connectivity and whether any lint worker
    answers a ping. Redis and workers only back async lint jobs, so their
    outage degrades rather than fails readiness.
    """
    from core.services.card_service import CardService
    from app.websocket.broadcast import get_redis_client
    from workers.celery_app import ping_workers

    checks = ChecksResponse(card_store="unknown", redis="unknown", workers="unknown")

    # Check card store
    try:
        count = len(CardService.list_cards())
        checks.card_store = f"healthy ({count} cards)"
    except Exception as e:
        checks.card_store = f"unhealthy: {str(e)[:50]}"

    # Check Redis
    try:
        get_redis_client().ping()
        checks.redis = "healthy"
    except Exception as e:
        checks.redis = f"unhealthy: {str(e)[:50]}"

    # Check lint workers (the ping travels through Redis)
    if checks.redis == "healthy":
        try:
            workers = await run_in_threadpool(ping_workers, 1.0)
            checks.workers = f"healthy ({len(workers)} workers)" if workers else "unavailable: no worker answered"
        except Exception as e:
            checks.workers = f"unhealthy: {str(e)[:50]}"
    else:
        checks.workers = "skipped: redis unavailable"

    all_healthy = (
        checks.card_store.startswith("healthy")
        and checks.redis == "healthy"
        and checks.workers.startswith("healthy")
    )

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    Used by Kubernetes/Docker for restart decisions.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )
