# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - card_parser.py: Markdown -> ReferenceCard
# - card_renderer.py: ReferenceCard -> Markdown
# - snippets.py: snippet extraction and static name analysis
# - api_index.py: lookups against the installed framework's public API
# - report.py: lint report export (pandas)
# - utils.py: shared utilities (errors, slugs)
#
# These modules are self-contained and can be tested in isolation.
# report.py depends on the linting package and is imported directly.
# =============================================================================

from lib.utils import ApplicationError, slugify
from lib.card_parser import CardParseError, parse_card
from lib.card_renderer import render_card
from lib.snippets import Snippet, SnippetSyntaxError, analyze, extract_snippets, parse_snippet
from lib.api_index import ApiIndex, ApiSymbol

__all__ = [
    # Utils
    "ApplicationError",
    "slugify",
    # Parsing / rendering
    "CardParseError",
    "parse_card",
    "render_card",
    # Snippets
    "Snippet",
    "SnippetSyntaxError",
    "analyze",
    "extract_snippets",
    "parse_snippet",
    # API index
    "ApiIndex",
    "ApiSymbol",
]
