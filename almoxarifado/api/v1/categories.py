"""
Category API endpoints.
"""
import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import get_current_user, require_roles
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from almoxarifado.services import catalog

router = APIRouter(prefix="/categories", tags=["Categories"])


def _response(category, item_count: int = 0) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        active=category.active,
        created_at=category.created_at,
        item_count=item_count
    )


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    include_inactive: bool = True,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List categories by name with their active item counts."""
    return [
        _response(category, count)
        for category, count in catalog.list_categories(db, include_inactive=include_inactive)
    ]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """Create a category. Names are unique, case-insensitively."""
    return _response(catalog.create_category(db, body.name, actor=current_user))


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """Rename or (de)activate a category."""
    category = catalog.update_category(
        db, category_id, name=body.name, active=body.active, actor=current_user
    )
    return _response(category)
