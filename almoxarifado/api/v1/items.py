"""
Stock item API endpoints.
"""
from typing import Optional
import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import get_current_user, require_roles
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.item import ItemCreate, ItemUpdate, ItemResponse
from almoxarifado.schemas.movement import MovementResponse
from almoxarifado.services import catalog, ledger

router = APIRouter(prefix="/items", tags=["Items"])


@router.get("", response_model=list[ItemResponse])
def list_items(
    q: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    include_inactive: bool = False,
    low_stock: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List items by name.

    - **q**: search in name, barcode, brand, model and serial number
    - **low_stock**: only items at or below their minimum quantity
    """
    return catalog.list_items(
        db,
        search=q,
        category_id=category_id,
        include_inactive=include_inactive,
        low_stock=low_stock
    )


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    body: ItemCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """Create an item; its barcode is generated."""
    item = catalog.create_item(db, body, actor=current_user)
    return catalog.get_item(db, item.id)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(
    item_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return catalog.get_item(db, item_id)


@router.patch("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: uuid.UUID,
    body: ItemUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """Update item details. Quantity is changed only by movements and loans."""
    item = catalog.update_item(db, item_id, body, actor=current_user)
    return catalog.get_item(db, item.id)


@router.delete("/{item_id}", response_model=ItemResponse)
def deactivate_item(
    item_id: uuid.UUID,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db)
):
    """Deactivate an item. Items are never physically removed."""
    item = catalog.deactivate_item(db, item_id, actor=current_user)
    return catalog.get_item(db, item.id)


@router.get("/{item_id}/movements", response_model=list[MovementResponse])
def list_item_movements(
    item_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Movements of one item, newest first."""
    catalog.get_item(db, item_id)
    return ledger.query_movements(db, item_id=item_id)
