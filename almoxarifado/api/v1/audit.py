"""
Audit log API endpoints (ADMIN only).
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import require_roles
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.audit import AuditLogResponse
from almoxarifado.services.audit import list_audit_logs

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("", response_model=list[AuditLogResponse])
def get_audit_logs(
    entity: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Audit entries newest first."""
    return list_audit_logs(db, entity=entity, action=action, limit=limit)
