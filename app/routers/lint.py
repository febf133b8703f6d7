# =============================================================================
# app/routers/lint.py - Lint Endpoints
# =============================================================================
# Runs the card linter synchronously, serves the last report, exports it as
# CSV, and submits async lint jobs to the Celery worker.
# =============================================================================

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from app.dependencies import CurrentUser
from app.websocket import build_event, websocket_manager
from core.models.lint import LintOptions, LintReportResponse
from core.services.card_service import CardService
from core.services.lint_service import LintService, to_report_response
from lib.report import report_to_csv, summarize
from linting import LintReport

logger = logging.getLogger(__name__)

router = APIRouter()

CardId = Annotated[UUID, Path(description="Card UUID")]


class LintTaskResponse(BaseModel):
    """Response model for async lint submission."""
    task_id: str
    card_id: str
    status: str
    message: str


# =============================================================================
# Helper Functions
# =============================================================================

async def lint_and_broadcast(card_id: str, options: LintOptions | None = None) -> LintReport:
    """
    Lint a stored card in the threadpool and tell WebSocket watchers.

    Used by the synchronous lint endpoint and by the upload background task.
    """
    CardService.get_card(card_id)
    linter = LintService.build_linter(options)
    await websocket_manager.broadcast(
        card_id, build_event("lint_started", {"task_id": None, "rules_total": len(linter.rule_codes)})
    )

    try:
        report = await run_in_threadpool(LintService.lint_card, card_id, options)
    except Exception as e:
        await websocket_manager.broadcast(
            card_id, build_event("lint_failed", {"task_id": None, "status": "FAILURE", "error": str(e)})
        )
        raise

    await websocket_manager.broadcast(
        card_id,
        build_event("lint_complete", {"task_id": None, "status": "SUCCESS", "summary": summarize(report)}),
    )
    return report


async def lint_in_background(card_id: str) -> None:
    """BackgroundTasks entry point; errors are logged, never raised."""
    try:
        await lint_and_broadcast(card_id)
    except Exception as e:
        logger.error(f"Background lint of card {card_id} failed: {e}")


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/{card_id}/lint", response_model=LintReportResponse)
async def lint_card(
    card_id: CardId,
    options: LintOptions | None = None,
):
    """
    Lint a card now and return the report.

    The body is optional; without it every rule runs at its default
    severity. The report is also kept as the card's last report.

    Raises:
        404: Card not found
        400: Unknown rule in select/ignore/severity_overrides
    """
    card_id = str(card_id)
    report = await lint_and_broadcast(card_id, options)
    return to_report_response(report, card_id)


@router.get("/{card_id}/lint", response_model=LintReportResponse)
async def get_last_report(card_id: CardId):
    """
    Get the most recent lint report for a card.

    Raises:
        404: Card not found, or card never linted
    """
    report = LintService.get_last_report(str(card_id))
    return to_report_response(report, str(card_id))


@router.get("/{card_id}/lint/summary")
async def get_report_summary(card_id: CardId) -> dict[str, Any]:
    """
    Finding totals per severity, rule and section for the last report.
    """
    return summarize(LintService.get_last_report(str(card_id)))


@router.get("/{card_id}/lint/export")
async def export_report(card_id: CardId):
    """
    Download the last lint report as CSV.

    Columns: rule, severity, section, line, symbol, message, suggestion
    """
    report = LintService.get_last_report(str(card_id))
    stem = report.source_name.rsplit(".", 1)[0] or "card"

    return Response(
        content=report_to_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{stem}_lint.csv"'},
    )


@router.post("/{card_id}/lint/async", response_model=LintTaskResponse, status_code=202)
async def submit_lint_task(
    card_id: CardId,
    user: CurrentUser,
    options: LintOptions | None = None,
):
    """
    Queue a lint job on the Celery worker.

    Progress arrives over the card's WebSocket; the result is available
    from GET /api/v1/tasks/{task_id}.

    Raises:
        404: Card not found
        400: Unknown rule in options
        503: Broker unavailable
    """
    card_id = str(card_id)
    record = CardService.get_card(card_id)
    options = options or LintOptions()

    # Fail fast on bad rule codes instead of in the worker
    LintService.build_linter(options)

    try:
        from workers.tasks import lint_card_markdown

        result = lint_card_markdown.delay(
            record["markdown"],
            record["filename"],
            card_id,
            options.model_dump(),
        )

    except Exception as e:
        logger.error(f"Error submitting lint task: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Failed to submit task. Is Redis running? Error: {e}"
        )

    logger.info(f"Queued lint task {result.id} for card {card_id} (by {user.username})")
    return LintTaskResponse(
        task_id=result.id,
        card_id=card_id,
        status="PENDING",
        message="Lint queued. Use GET /api/v1/tasks/{task_id} to check status.",
    )
