import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from matchcore.core.database import get_db
from matchcore.core.deps import get_tenant_id
from matchcore.crud import match_quality as mqi_crud
from matchcore.schemas.quality import MatchQualityResult, MatchQualitySnapshotResponse
from matchcore.services.match_quality import calculate_match_quality_index

router = APIRouter(prefix="/quality", tags=["Match Quality"])
logger = logging.getLogger(__name__)


@router.get("/mqi", response_model=MatchQualityResult)
def get_match_quality_index(
    job_id: Optional[int] = None,
    recruiter_id: Optional[str] = None,
    window_days: int = Query(30, ge=1, le=365),
    reference_date: Optional[datetime] = None,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Compute the Match Quality Index for the tenant.

    Optionally scoped to one job or one recruiter. The window ends on
    reference_date (default: now).
    """
    return calculate_match_quality_index(
        db,
        tenant_id,
        job_id=job_id,
        recruiter_id=recruiter_id,
        window_days=window_days,
        reference_date=reference_date
    )


@router.get("/snapshots", response_model=List[MatchQualitySnapshotResponse])
def list_match_quality_snapshots(
    window_days: Optional[int] = None,
    limit: int = Query(52, ge=1, le=260),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    List the tenant's weekly MQI snapshots, newest first.
    """
    return mqi_crud.list_snapshots(db, tenant_id, window_days=window_days, limit=limit)
