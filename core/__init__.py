# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the card domain:
# - models/: Pydantic schemas (card document, API contracts, lint schemas)
# - services/: card store and lint service used by the API routes
#
# Models should NOT import from FastAPI or Celery.
# =============================================================================
