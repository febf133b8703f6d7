# =============================================================================
# app/routers/rules.py - Rule Catalog
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from core.models.lint import RuleResponse
from linting import get_all_rules_info, get_rule, list_rules
from linting.engine import UnknownRuleError

router = APIRouter()


@router.get("", response_model=list[RuleResponse])
async def get_rules(
    category: Annotated[str | None, Query(description="Filter by category")] = None,
):
    """
    List the registered lint rules.

    Categories: snippets, api, structure
    """
    info = get_all_rules_info()
    return [info[code].to_dict() for code in list_rules(category)]


@router.get("/{rule}", response_model=RuleResponse)
async def get_rule_detail(
    rule: Annotated[str, Path(description="Rule code or name, e.g. RC002 or unknown-api")],
):
    """Get one rule by code or name."""
    cls = get_rule(rule)
    if cls is None:
        raise UnknownRuleError(rule)
    return cls.info().to_dict()
