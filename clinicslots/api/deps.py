from fastapi import Header, HTTPException, status

from clinicslots.core.db import get_session

__all__ = ["get_session", "get_tenant_id"]


def get_tenant_id(x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID")) -> str:
    """Tenant whose rows the request may read and write; every query is scoped by it."""
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Tenant-ID header",
        )
    return x_tenant_id.strip()
