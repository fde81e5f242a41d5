"""
Movement ledger API endpoints.
"""
from typing import Optional
from datetime import date
import uuid
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import get_current_user, require_roles
from almoxarifado.error_handlers import ValidationError
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.movement import MovementCreate, MovementResponse, MovementAggregate
from almoxarifado.services import ledger

router = APIRouter(prefix="/movements", tags=["Movements"])


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
def create_movement(
    body: MovementCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """
    Record a stock entry or exit.

    - **type**: ENTRY or EXIT
    - **quantity**: positive integer; an EXIT cannot exceed the current stock
    """
    ledger.record_movement(
        db,
        item_id=body.item_id,
        movement_type=body.type,
        quantity=body.quantity,
        user_id=current_user.id,
        note=body.note
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[MovementResponse])
def list_movements(
    item_id: Optional[uuid.UUID] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Movements newest first, with item and user display fields."""
    return ledger.query_movements(db, item_id=item_id, limit=limit)


@router.get("/aggregate", response_model=list[MovementAggregate])
def aggregate_movements(
    item_id: Optional[uuid.UUID] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Daily entries, exits and running balance.

    - **item_id**: takes precedence over category_id
    - **start_date** / **end_date**: inclusive calendar days
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date", field="start_date")

    return ledger.aggregate_movimentacao(
        db,
        item_id=item_id,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date
    )
