"""
Best-effort audit trail.

Entries are written after the audited operation has committed, in their own
commit. A failure here is logged and dropped; it never undoes the operation.
"""
from typing import Optional
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from almoxarifado.logging_config import get_logger
from almoxarifado.models.audit import AuditLog

logger = get_logger("audit")


def log_action(
    db: Session,
    user,
    action: str,
    entity: str,
    entity_id=None,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None
) -> None:
    """Record who did what. Never raises."""
    try:
        entry = AuditLog(
            user_id=user.id if user is not None else None,
            user_email=getattr(user, "email", None),
            user_name=getattr(user, "name", None),
            action=action,
            entity=entity,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=details,
            ip_address=ip_address
        )
        db.add(entry)
        db.commit()
        logger.info(f"[AUDIT] {action} {entity}:{entity_id} by {getattr(user, 'email', None)}")
    except Exception as e:
        db.rollback()
        logger.error(f"[AUDIT] Failed to record {action} on {entity}:{entity_id}: {str(e)}")


def list_audit_logs(
    db: Session,
    entity: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    query = select(AuditLog)
    if entity:
        query = query.where(AuditLog.entity == entity)
    if action:
        query = query.where(AuditLog.action == action)
    query = query.order_by(desc(AuditLog.created_at)).limit(limit)
    return list(db.scalars(query).all())
