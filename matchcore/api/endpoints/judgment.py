import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session

from matchcore.core.database import get_db
from matchcore.core.deps import get_tenant_id
from matchcore.core.celery_utils import queue_task_safely
from matchcore.schemas.judgment import DecisionCultureCue, DriftAdjustment, JudgmentInsight
from matchcore.services.cultural_cues import build_decision_culture_cues
from matchcore.services.drift_plan import build_drift_plan
from matchcore.services.judgment_aggregator import get_supported_judgment_metrics
from matchcore.services.judgment_insights import get_latest_judgment_insights
from matchcore.tasks import judgment_tasks

router = APIRouter(prefix="/judgment", tags=["Judgment Memory"])
logger = logging.getLogger(__name__)


@router.get("/insights", response_model=List[JudgmentInsight])
def list_judgment_insights(
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Latest-window aggregate bundle for every firm, client and role type.
    """
    return get_latest_judgment_insights(db, tenant_id)


@router.get("/metrics", response_model=List[str])
def list_judgment_metrics():
    """Metric names produced for every dimension value."""
    return get_supported_judgment_metrics()


@router.get("/drift-plan", response_model=List[DriftAdjustment])
def get_drift_plan(
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Advisory adjustments derived from recent decisions.

    Each adjustment is "watching" until enough decisions back it, then
    "applied". Applied adjustments only tune advisory weights.
    """
    return build_drift_plan(get_latest_judgment_insights(db, tenant_id))


@router.get("/cues", response_model=List[DecisionCultureCue])
def get_culture_cues(
    client_id: Optional[str] = None,
    role_type: Optional[str] = None,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Up to two decision-culture cues for a client or role type.
    """
    insights = get_latest_judgment_insights(db, tenant_id)
    return build_decision_culture_cues(insights, client_id=client_id, role_type=role_type)


@router.post("/aggregate", status_code=status.HTTP_202_ACCEPTED)
def queue_judgment_aggregation(window_days: Optional[int] = Query(None, ge=1, le=365)):
    """
    Queue a judgment aggregation run for all tenants.

    The run happens in a Celery worker; this endpoint returns once the task
    is on the queue.
    """
    task_id = queue_task_safely(judgment_tasks.run_judgment_aggregation_task, window_days=window_days)
    if not task_id:
        raise HTTPException(status_code=503, detail="Failed to queue judgment aggregation")

    return {"status": "queued", "task_id": task_id}
