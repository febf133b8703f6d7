# =============================================================================
# linting/registry.py - Rule Registry
# =============================================================================
# Centralized registry for all card lint rules.
# Provides lookup, listing, and info retrieval.
# =============================================================================

from __future__ import annotations

from typing import Type

from linting.types import Rule, RuleInfo


# Global registry: code -> Rule class
RULE_REGISTRY: dict[str, Type[Rule]] = {}


def register_rule(cls: Type[Rule]) -> Type[Rule]:
    """
    Decorator to register a rule class.

    Usage:
        @register_rule
        class SnippetSyntax(Rule):
            ...

    The rule will be registered under its info().code.
    """
    code = cls.info().code

    if code in RULE_REGISTRY:
        raise ValueError(f"Rule '{code}' is already registered")

    RULE_REGISTRY[code] = cls
    return cls


def get_rule(code: str) -> Type[Rule] | None:
    """Get a rule class by code ("RC001") or name ("snippet-syntax")."""
    if code in RULE_REGISTRY:
        return RULE_REGISTRY[code]
    for cls in RULE_REGISTRY.values():
        if cls.info().name == code:
            return cls
    return None


def list_rules(category: str | None = None) -> list[str]:
    """
    List registered rule codes, sorted.

    Args:
        category: If provided, filter by category (e.g., "snippets", "structure")
    """
    codes = sorted(RULE_REGISTRY)
    if category is None:
        return codes
    return [code for code in codes if RULE_REGISTRY[code].info().category == category]


def get_rule_info(code: str) -> RuleInfo | None:
    """Get metadata about a rule."""
    cls = get_rule(code)
    if cls is None:
        return None
    return cls.info()


def get_all_rules_info() -> dict[str, RuleInfo]:
    """Get info for all registered rules, keyed by code."""
    return {code: RULE_REGISTRY[code].info() for code in sorted(RULE_REGISTRY)}
