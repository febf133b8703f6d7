# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the RefCard project:
# - test_parser.py / test_renderer.py: Markdown <-> ReferenceCard
# - test_snippets.py / test_api_index.py: snippet analysis, API lookups
# - test_rules.py / test_engine.py: lint rules and the engine
# - test_report.py: pandas report export
# - test_models.py / test_card_service.py: schemas and the card store
# - test_api.py / test_auth.py / test_websocket.py: HTTP and WebSocket API
# - test_workers.py / test_cli.py: async lint job and command-line linter
# - test_bundled_card.py: the shipped reference card lints clean
#
# Run tests with: pytest
# =============================================================================
