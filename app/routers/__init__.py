# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - cards.py: Card upload, listing, sections, search and deletion
# - lint.py: Synchronous lint, reports, CSV export, async lint jobs
# - tasks.py: Background task status endpoints
# - rules.py: Lint rule catalog
# - symbols.py: Resolve API references against the installed framework
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import cards
from . import lint
from . import tasks
from . import rules
from . import symbols

__all__ = [
    "health",
    "cards",
    "lint",
    "tasks",
    "rules",
    "symbols",
]
