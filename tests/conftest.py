# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Provides sample cards and a clean card store per test
# =============================================================================

import os
import sys
from pathlib import Path

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("API_USERNAME", "editor")
os.environ.setdefault("API_PASSWORD", "editor-password")
os.environ.setdefault("ADMIN_USERNAMES", "admin")
os.environ.setdefault("ENABLE_REDIS_LISTENER", "false")
os.environ.setdefault("REDIS_URL", "redis://localhost:6399/0")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from core.services.card_service import CardService
from core.services.lint_service import LintService
from lib.card_parser import parse_card

BUNDLED_CARD = PROJECT_ROOT / "docs" / "fastapi_reference_card.md"


# A small card that lints clean against any FastAPI 0.100+ / Pydantic 2 install
CLEAN_CARD = '''# Mini Card

FastAPI 0.100+ / Pydantic 2.0+

## Routing

| Function/Class | Purpose | Example | Notes |
|----------------|---------|---------|-------|
| `@app.get()` | Register a GET route | `@app.get("/")` | |
| `Depends()` | Declare a dependency | `async def read(db: dict = Depends(get_db)): ...` | |

```python
from fastapi import FastAPI

app = FastAPI()


@app.get("/")
async def root():
    return {"ok": True}
```
'''


# One problem per rule, line numbers noted
BROKEN_CARD = '''# Broken Card

FastAPI 0.100+

## Models

| Function/Class | Purpose | Example | Notes |
|----------------|---------|---------|-------|
| `BaseModel` | Schemas | `class Item(BaseModel) name: str` | |
| `FastApiRouterThing` | Does not exist | `x = 1` | |
| `BaseModel` | | `y = 2` | |

```python
import json
from fastapi import FastAPI

app = FastAPI()


@app.get("/")
async def root(q: str = Query(None)):
    return {"q": q}
```

## Empty

## Open Fence

```python
print("never closed")
'''


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clear_stores():
    """Every test starts with an empty card store and no reports."""
    CardService.clear()
    LintService.clear()
    yield
    CardService.clear()
    LintService.clear()


@pytest.fixture
def clean_card_text():
    return CLEAN_CARD


@pytest.fixture
def broken_card_text():
    return BROKEN_CARD


@pytest.fixture
def clean_card():
    return parse_card(CLEAN_CARD, source_name="mini.md")


@pytest.fixture
def broken_card():
    return parse_card(BROKEN_CARD, source_name="broken.md")


@pytest.fixture
def bundled_card_text():
    return BUNDLED_CARD.read_text(encoding="utf-8")


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def client():
    """TestClient with lifespan (the bundled card is registered on startup)."""
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def token(client):
    response = client.post(
        "/api/v1/auth/token",
        data={"username": "editor", "password": "editor-password"},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def upload(client, auth_headers):
    """Upload markdown as a card; returns the response."""

    def _upload(text: str, filename: str = "card.md", headers: dict | None = None):
        return client.post(
            "/api/v1/cards",
            files={"file": (filename, text.encode("utf-8"), "text/markdown")},
            headers=auth_headers if headers is None else headers,
        )

    return _upload
