# =============================================================================
# workers/celery_app.py - Celery Application for Lint Jobs
# =============================================================================
# The Celery app that runs async card lints (POST /cards/{id}/lint/async).
# Broker and result backend are both Redis; see workers/config.py for queues,
# time limits and serialization.
#
# Usage:
#   celery -A workers.celery_app worker --loglevel=info -Q lint,default
#
#   # From the API: which workers answer right now?
#   from workers.celery_app import ping_workers
#   ping_workers(timeout=1.0)   # ["celery@host"]
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

LINT_TASK_NAME = "workers.tasks.lint_card_markdown"


def create_celery_app() -> Celery:
    """Build the lint worker app from settings and CeleryConfig."""
    from app.config import settings

    app = Celery(
        "refcard_worker",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["workers.tasks"],
    )
    app.config_from_object("workers.config:CeleryConfig")

    # Never log credentials embedded in the URL
    logger.info(f"Celery app created with broker: {settings.REDIS_URL.split('@')[-1]}")
    return app


celery_app = create_celery_app()


def ping_workers(timeout: float = 1.0) -> list[str]:
    """
    Names of the workers that answer a broadcast ping within `timeout`.

    Blocks for up to `timeout` seconds; call it from a thread in async code.
    An empty list means async lint jobs would sit in the queue.
    """
    replies = celery_app.control.ping(timeout=timeout) or []
    return sorted(name for reply in replies for name in reply)


# =============================================================================
# Lint Job Lifecycle Logging
# =============================================================================

def _card_id(task, args, kwargs) -> str | None:
    """Card id of a lint job, whether it was passed by position or keyword."""
    if task is None or task.name != LINT_TASK_NAME:
        return None
    if kwargs and "card_id" in kwargs:
        return kwargs["card_id"]
    if args and len(args) > 2:
        return args[2]
    return None


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    card_id = _card_id(task, args, kwargs)
    if card_id:
        logger.info(f"Lint job started for card {card_id} [{task_id}]")
    else:
        logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, retval=None, state=None, **extra):
    card_id = _card_id(task, args, kwargs)
    if card_id and isinstance(retval, dict):
        counts = retval.get("counts", {})
        logger.info(
            f"Lint job for card {card_id} [{task_id}] {state}: "
            f"{counts.get('error', 0)} error(s), {counts.get('warning', 0)} warning(s)"
        )
    else:
        logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, args=None, kwargs=None, **extra):
    card_id = _card_id(sender, args, kwargs)
    target = f"card {card_id}" if card_id else sender.name
    logger.error(f"Task failed for {target} [{task_id}] - Error: {exception}")


if __name__ == "__main__":
    celery_app.start()
