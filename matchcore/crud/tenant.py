"""
CRUD operations for tenants and tenant configuration.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from matchcore.models.tenant import OperatingMode, Tenant, TenantConfig


def get_by_id(db: Session, tenant_id: str) -> Optional[Tenant]:
    return db.query(Tenant).filter(Tenant.id == tenant_id).first()


def list_ids(db: Session) -> List[str]:
    """All tenant ids, in a stable order."""
    return [row[0] for row in db.query(Tenant.id).order_by(Tenant.id.asc()).all()]


def get_operating_mode(db: Session, tenant_id: str) -> OperatingMode:
    """
    Resolve a tenant's operating mode.

    Unknown tenants resolve to PILOT, the default mode for new tenants.
    """
    tenant = get_by_id(db, tenant_id)
    if not tenant or tenant.operating_mode is None:
        return OperatingMode.PILOT
    return OperatingMode(tenant.operating_mode)


def get_config(db: Session, tenant_id: str) -> Optional[TenantConfig]:
    return db.query(TenantConfig).filter(TenantConfig.tenant_id == tenant_id).first()
