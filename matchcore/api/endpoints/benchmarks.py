from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from matchcore.core.database import get_db
from matchcore.core.deps import get_tenant_id
from matchcore.schemas.benchmark import ClientBenchmarkingResult
from matchcore.services.benchmarks import get_client_relative_benchmarks

router = APIRouter(prefix="/benchmarks", tags=["Benchmarks"])


@router.get("", response_model=ClientBenchmarkingResult)
def get_benchmarks(
    role_family: Optional[str] = None,
    window_days: Optional[int] = Query(None, ge=1, le=365),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Compare the tenant's learning signals with anonymized peer medians.

    Tenants not opted into network learning get an empty comparison list
    and an explanatory note.
    """
    return get_client_relative_benchmarks(db, tenant_id, role_family=role_family, window_days=window_days)
