# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for linting reference cards.
#
# Tasks:
# - lint_card_markdown: Parse and lint a card, reporting progress per rule
# =============================================================================

import logging
from typing import Any

from celery import current_task, shared_task

from app.websocket.broadcast import (
    publish_lint_complete,
    publish_lint_failed,
    publish_lint_progress,
    publish_lint_started,
)
from core.models.lint import LintOptions
from lib.report import summarize
from linting import Linter
from linting.engine import ProgressCallback

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task and current_task.request.id:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100) if total else 100,
                "message": message,
            }
        )


# =============================================================================
# Lint Job
# =============================================================================

def run_lint_job(
    markdown: str,
    source_name: str,
    options: dict[str, Any] | None = None,
    progress: ProgressCallback | None = None,
) -> dict[str, Any]:
    """
    Parse and lint a card.

    Plain function so it can run (and be tested) without a broker.

    Args:
        markdown: Card source
        source_name: Name shown in findings
        options: LintOptions as a dict
        progress: Called after each rule with (done, total, rule_code)

    Returns:
        Dict with:
        - report: LintReport.to_dict()
        - summary: lib.report.summarize()

    Raises:
        CardParseError: If the card is empty
        UnknownRuleError: If options name a rule that doesn't exist
    """
    lint_options = LintOptions(**(options or {}))
    linter = Linter(
        select=lint_options.select,
        ignore=lint_options.ignore,
        severity_overrides=lint_options.severity_overrides,
    )

    report = linter.lint_text(markdown, source_name=source_name, progress=progress)

    return {
        "report": report.to_dict(),
        "summary": summarize(report),
    }


@shared_task(bind=True, name="workers.tasks.lint_card_markdown")
def lint_card_markdown(
    self,
    markdown: str,
    source_name: str,
    card_id: str,
    options: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Lint a card off the request path.

    Progress is reported two ways: Celery PROGRESS state (for polling
    GET /api/v1/tasks/{task_id}) and lint_* events on the card's WebSocket.

    Returns:
        The lint report dict (LintReport.to_dict())
    """
    task_id = self.request.id
    logger.info(f"Linting card {card_id} ({source_name})")

    started = False

    def on_progress(done: int, total: int, rule: str) -> None:
        nonlocal started
        if not started:
            publish_lint_started(card_id, task_id, total)
            started = True
        update_progress(done, total, f"Ran {rule}")
        publish_lint_progress(card_id, task_id, int(done / total * 100), rule)

    try:
        result = run_lint_job(markdown, source_name, options, progress=on_progress)
    except Exception as e:
        logger.error(f"Lint of card {card_id} failed: {e}")
        publish_lint_failed(card_id, task_id, str(e))
        raise

    publish_lint_complete(card_id, task_id, result["summary"], report=result["report"])
    return result["report"]
