# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the RefCard API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main          # binds API_HOST:API_PORT from settings
# =============================================================================

import asyncio
import json
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.websocket import websocket_manager, WEBSOCKET_CHANNEL
from app.exceptions import (
    CardNotFoundError,
    RefCardException,
    application_error_handler,
    refcard_exception_handler,
)
from app.routers import health, cards, lint, tasks, rules, symbols
from app.auth import routes as auth_routes
from app.websocket import routes as websocket_routes
from core.services.card_service import CardService
from core.services.lint_service import LintService
from lib.utils import ApplicationError
from linting import LintReport

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Global handles for the Redis listener task
_redis_listener_task = None
_shutdown_event = None


async def handle_worker_event(data: dict) -> None:
    """
    Rebroadcast one worker event to the card's WebSocket clients.

    A lint_complete event may carry the full report; it is stored as the
    card's last report and not forwarded.
    """
    card_id = data.pop("card_id", None)
    if not card_id:
        return

    report = data.pop("report", None)
    if report is not None:
        try:
            LintService.store_report(card_id, LintReport.from_dict(report))
        except CardNotFoundError:
            logger.info(f"Dropped lint report for deleted card {card_id}")

    await websocket_manager.broadcast(card_id, data)
    logger.debug(f"Broadcast {data.get('type')} to card {card_id}")


async def redis_pubsub_listener():
    """
    Background task that listens to Redis pub/sub and broadcasts to WebSockets.

    This bridges Celery workers with WebSocket clients by:
    1. Subscribing to the Redis channel where workers publish events
    2. Broadcasting received events to connected WebSocket clients
    """
    import redis.asyncio as aioredis

    logger.info("Starting Redis pub/sub listener for WebSocket broadcasts")

    redis_client = aioredis.from_url(settings.REDIS_URL)
    pubsub = redis_client.pubsub()

    try:
        await pubsub.subscribe(WEBSOCKET_CHANNEL)

        async for message in pubsub.listen():
            if _shutdown_event and _shutdown_event.is_set():
                break

            if message["type"] != "message":
                continue

            try:
                await handle_worker_event(json.loads(message["data"]))
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON in Redis message: {e}")
            except Exception as e:
                logger.error(f"Error processing Redis message: {e}")

    except asyncio.CancelledError:
        logger.info("Redis pub/sub listener cancelled")
    except Exception as e:
        logger.error(f"Redis pub/sub listener error: {e}")
    finally:
        try:
            await pubsub.unsubscribe(WEBSOCKET_CHANNEL)
            await redis_client.aclose()
        except Exception as e:
            logger.debug(f"Redis listener cleanup failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Register the bundled card, start the Redis listener
    - Shutdown: Stop background tasks
    """
    global _redis_listener_task, _shutdown_event

    # Startup
    logger.info(f"Starting RefCard API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    if settings.LOAD_BUNDLED_CARD:
        record = CardService.load_bundled_card(settings.BUNDLED_CARD_PATH)
        if record is not None:
            logger.info(f"Bundled card registered: {record['title']} [{record['id']}]")

    if settings.ENABLE_REDIS_LISTENER:
        _shutdown_event = asyncio.Event()
        _redis_listener_task = asyncio.create_task(redis_pubsub_listener())

    yield

    # Shutdown
    logger.info("Shutting down RefCard API")

    if _shutdown_event:
        _shutdown_event.set()
    if _redis_listener_task:
        _redis_listener_task.cancel()
        try:
            await _redis_listener_task
        except asyncio.CancelledError:
            pass
        _redis_listener_task = None


# Create FastAPI application
app = FastAPI(
    title="RefCard API",
    description="""
## FastAPI Reference Card Service

Serves and lints Markdown reference cards: tables of
`Function/Class | Purpose | Example | Notes` plus fenced Python examples.

### What the linter checks

| Rule | Check |
|------|-------|
| **RC001** | Every example parses |
| **RC002** | Every referenced name exists in the installed framework |
| **RC003 / RC004** | Code blocks import what they use, and use what they import |
| **RC005-RC009** | Table columns, empty cells, duplicates, empty sections, open fences |
| **RC010** | Stated framework versions are installed |

### Quick Start

```bash
# 1. Get a token
curl -X POST http://localhost:8000/api/v1/auth/token \\
  -d "username=editor&password=editor-password"

# 2. Upload a card
curl -X POST http://localhost:8000/api/v1/cards \\
  -H "Authorization: Bearer $TOKEN" -F "file=@card.md"

# 3. Lint it
curl -X POST http://localhost:8000/api/v1/cards/{id}/lint
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Obtain and verify bearer tokens",
        },
        {
            "name": "Cards",
            "description": "Upload, browse and search reference cards",
        },
        {
            "name": "Lint",
            "description": "Lint cards and export reports",
        },
        {
            "name": "Tasks",
            "description": "Track async lint jobs",
        },
        {
            "name": "Rules",
            "description": "Lint rule catalog",
        },
        {
            "name": "Symbols",
            "description": "Resolve API references against the installed framework",
        },
        {
            "name": "WebSocket",
            "description": "Real-time lint updates",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rendered cards and reports compress well
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    """Tag each response with a request ID and its processing time."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start_time = time.perf_counter()

    response = await call_next(request)

    elapsed = time.perf_counter() - start_time
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({elapsed * 1000:.1f}ms) [{request_id}]"
    )
    return response


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(RefCardException)
async def handle_refcard_exception(request: Request, exc: RefCardException):
    """Handle custom RefCard exceptions."""
    return await refcard_exception_handler(request, exc)


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    """Handle parser and linter errors."""
    return await application_error_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Card endpoints
app.include_router(
    cards.router,
    prefix="/api/v1/cards",
    tags=["Cards"]
)

# Lint endpoints
app.include_router(
    lint.router,
    prefix="/api/v1/cards",
    tags=["Lint"]
)

# Task status endpoints
app.include_router(
    tasks.router,
    prefix="/api/v1/tasks",
    tags=["Tasks"]
)

# Rule catalog
app.include_router(
    rules.router,
    prefix="/api/v1/rules",
    tags=["Rules"]
)

# Symbol lookup
app.include_router(
    symbols.router,
    prefix="/api/v1/symbols",
    tags=["Symbols"]
)

# WebSocket endpoints (Real-time updates)
app.include_router(
    websocket_routes.router,
    tags=["WebSocket"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "RefCard API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


# =============================================================================
# Server Entry Point
# =============================================================================

def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG and not settings.is_production,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    run()
