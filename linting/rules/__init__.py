# =============================================================================
# linting/rules - All Card Lint Rules
# =============================================================================
# Rules are organized by category:
#   - snippets: Python examples parse and import what they use
#   - api: references exist in the installed framework, versions match
#   - structure: tables, sections and fences are well formed
#
# Import all rule modules here to register them with the global registry.
# =============================================================================

from linting.rules import snippets
from linting.rules import api
from linting.rules import structure
