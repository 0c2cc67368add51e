"""
Queueing of batch tasks from request handlers.

Publishing happens on a worker thread over a fresh kombu connection to the
task's own broker. An unreachable or slow broker yields None instead of an
exception; endpoints answer that with 503.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional
from uuid import uuid4
from celery import Task
from kombu import Connection

logger = logging.getLogger(__name__)

QUEUE_TIMEOUT_SECONDS = 5
RETRY_POLICY = {
    "max_retries": 3,
    "interval_start": 0,
    "interval_step": 0.2,
    "interval_max": 0.2,
}

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="celery_queue")


def _publish(task: Task, task_id: str, args: tuple, kwargs: dict) -> None:
    with Connection(task.app.conf.broker_url) as conn:
        task.apply_async(
            args=args,
            kwargs=kwargs,
            task_id=task_id,
            connection=conn,
            retry=True,
            retry_policy=RETRY_POLICY,
        )


def queue_task_safely(task: Task, *args, **kwargs) -> Optional[str]:
    """
    Queue a Celery task, reporting failure instead of raising.

    The task id is assigned before publishing so that a failed attempt can
    be traced in the logs under the same id.

    Args:
        task: The Celery task to queue
        *args: Positional arguments for the task
        **kwargs: Keyword arguments for the task

    Returns:
        The task id if queued, None otherwise
    """
    task_id = str(uuid4())
    future = _executor.submit(_publish, task, task_id, args, kwargs)

    try:
        future.result(timeout=QUEUE_TIMEOUT_SECONDS)
    except FutureTimeoutError:
        logger.error(f"Timed out queueing {task.name} after {QUEUE_TIMEOUT_SECONDS}s", extra={"task_id": task_id})
        return None
    except Exception as e:
        logger.error(f"Failed to queue {task.name}: {e}", extra={"task_id": task_id})
        return None

    logger.info(f"Queued {task.name}", extra={"task_id": task_id})
    return task_id
