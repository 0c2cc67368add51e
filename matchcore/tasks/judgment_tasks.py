"""
Celery tasks for judgment memory.
"""

import logging
from datetime import datetime
from typing import Optional

from matchcore.core.celery_app import celery_app
from matchcore.core.database import SessionLocal
from matchcore.services.judgment_aggregator import run_judgment_memory_aggregation

logger = logging.getLogger(__name__)


@celery_app.task(name="matchcore.tasks.judgment_tasks.run_judgment_aggregation_task", bind=True)
def run_judgment_aggregation_task(self, now: Optional[str] = None, window_days: Optional[int] = None):
    """
    Recompute judgment aggregates for every tenant.

    Runs nightly from beat and on demand from the API. Tenant failures are
    isolated inside the run and reported in failed_tenants.

    Args:
        self: Celery task instance (when bind=True)
        now: ISO timestamp anchoring the window (defaults to the current time)
        window_days: Window length in days (defaults to JUDGMENT_WINDOW_DAYS)

    Returns:
        dict: tenants_processed, aggregates_written and failed_tenants
    """
    logger.info(f"[Task {self.request.id}] Starting judgment aggregation (window_days={window_days})")

    db = SessionLocal()
    try:
        result = run_judgment_memory_aggregation(
            db,
            now=datetime.fromisoformat(now) if now else None,
            window_days=window_days,
        )

        if result.failed_tenants:
            logger.warning(f"[Task {self.request.id}] Aggregation failed for tenants: {', '.join(result.failed_tenants)}")

        logger.info(
            f"[Task {self.request.id}] Aggregation complete: {result.tenants_processed} tenants, "
            f"{result.aggregates_written} aggregates"
        )
        return result.model_dump()

    except Exception as e:
        logger.error(f"[Task {self.request.id}] Judgment aggregation run failed: {e}", exc_info=True)
        raise
    finally:
        db.close()
