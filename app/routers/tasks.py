# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Provides endpoints for checking async lint job status and results.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")]
):
    """
    Get the status of a lint job.

    Returns the current state of the task:
    - PENDING: Task is waiting in queue
    - STARTED: Task has been picked up by a worker
    - PROGRESS: Rules are running (includes progress percentage and rule)
    - SUCCESS: Lint finished; `result` is the lint report
    - FAILURE: Task failed
    """
    try:
        from workers.celery_app import celery_app

        result = celery_app.AsyncResult(task_id)
        state = result.status

    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")

    response = TaskStatusResponse(task_id=task_id, status=state)

    # Add details based on state
    if state == "PROGRESS":
        info = result.info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Linting...")

    elif state == "SUCCESS":
        response.result = result.result
        response.progress = 100
        response.message = "Complete"

    elif state == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"
        response.message = "Failed"

    elif state == "PENDING":
        response.progress = 0
        response.message = "Waiting in queue..."

    elif state == "STARTED":
        response.progress = 0
        response.message = "Starting..."

    return response
