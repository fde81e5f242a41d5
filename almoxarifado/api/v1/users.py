"""
User administration API endpoints (ADMIN only).
"""
import uuid
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import require_roles
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.user import UserCreate, UserUpdate, PasswordReset, UserResponse
from almoxarifado.services import users as user_service

router = APIRouter(prefix="/users", tags=["Users"])

admin_only = require_roles(UserRole.ADMIN)


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.get("", response_model=list[UserResponse])
def list_users(
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return user_service.list_users(db)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    request: Request,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """Create a user. Role defaults to OPERATOR."""
    return user_service.create_user(db, body, actor=current_user, ip_address=_client_ip(request))


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    request: Request,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """Change name, role or active flag. Inactive users cannot sign in."""
    return user_service.update_user(db, user_id, body, actor=current_user, ip_address=_client_ip(request))


@router.post("/{user_id}/reset-password", status_code=status.HTTP_204_NO_CONTENT)
def reset_password(
    user_id: uuid.UUID,
    body: PasswordReset,
    request: Request,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    user_service.reset_password(
        db, user_id, body.new_password, actor=current_user, ip_address=_client_ip(request)
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
