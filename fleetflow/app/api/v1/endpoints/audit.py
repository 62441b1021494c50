"""
Audit trail API Endpoints (admin-only).
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from fleetflow.app.db.session import get_db
from fleetflow.app.schemas.audit import AuditLogResponse, AuditTrailResponse
from fleetflow.app.core.guards import require_admin
from fleetflow.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin/audit", tags=["Admin - Audit"])


@router.get("", response_model=AuditTrailResponse)
async def list_audit_trail(
    target_type: Optional[str] = Query(None, description="e.g. trip, vehicle, user"),
    target_id: Optional[int] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Recent audit entries, newest first.

    Filter by target to see the full history of one trip or vehicle.
    """
    logs = await get_audit_trail(
        db=db, target_type=target_type, target_id=target_id, action=action, limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
