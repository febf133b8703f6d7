# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# linting reference cards off the request path.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (async card lint)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info -Q lint,default
#
#   # Or use the script
#   python scripts/start_worker.py
#
#   # Submit task (from API)
#   from workers.tasks import lint_card_markdown
#   result = lint_card_markdown.delay(markdown, "card.md", card_id, {})
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
