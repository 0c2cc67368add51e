"""
FastAPI dependencies for tenant scoping.

Authentication sits in front of this service; requests arrive with the
tenant already resolved in the X-Tenant-ID header.
"""

from fastapi import Header, HTTPException, status


def get_tenant_id(x_tenant_id: str = Header(..., alias="X-Tenant-ID")) -> str:
    """
    Extract the tenant id from the X-Tenant-ID header.

    Raises:
        HTTPException 400: If the header is blank
    """
    tenant_id = x_tenant_id.strip()
    if not tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header must not be empty"
        )
    return tenant_id
