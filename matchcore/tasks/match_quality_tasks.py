"""
Celery tasks for Match Quality Index snapshots.
"""

import logging
from datetime import datetime
from typing import Optional

from matchcore.core.celery_app import celery_app
from matchcore.core.database import SessionLocal
from matchcore.crud import tenant as tenant_crud
from matchcore.services.match_quality import capture_weekly_match_quality_snapshots

logger = logging.getLogger(__name__)


@celery_app.task(name="matchcore.tasks.match_quality_tasks.capture_match_quality_snapshots_task", bind=True)
def capture_match_quality_snapshots_task(self, reference_date: Optional[str] = None):
    """
    Capture this week's MQI snapshots for every tenant.

    Each tenant's operating mode is loaded here and passed down; tenants in a
    restricted mode are skipped by the capture itself. One tenant failing
    does not stop the others.

    Args:
        self: Celery task instance (when bind=True)
        reference_date: ISO timestamp for the capture week (defaults to now)

    Returns:
        dict: captured snapshot count per tenant and the failed tenant ids
    """
    logger.info(f"[Task {self.request.id}] Starting weekly MQI snapshot capture")
    reference = datetime.fromisoformat(reference_date) if reference_date else None

    db = SessionLocal()
    captured = {}
    failed = []
    try:
        for tenant_id in tenant_crud.list_ids(db):
            try:
                mode = tenant_crud.get_operating_mode(db, tenant_id)
                snapshots = capture_weekly_match_quality_snapshots(db, tenant_id, mode, reference_date=reference)
                captured[tenant_id] = len(snapshots)
            except Exception as e:
                db.rollback()
                logger.error(
                    f"MQI capture failed for tenant {tenant_id}: {e}",
                    exc_info=True,
                    extra={"tenant_id": tenant_id, "task_id": self.request.id},
                )
                failed.append(tenant_id)

        logger.info(f"[Task {self.request.id}] MQI capture complete: {len(captured)} tenants, {len(failed)} failed")
        return {"captured": captured, "failed_tenants": failed}
    finally:
        db.close()
