"""
Authentication API endpoints for login and token management.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import (
    create_access_token,
    create_refresh_token,
    verify_refresh_token,
    get_current_user
)
from almoxarifado.error_handlers import UnauthenticatedError
from almoxarifado.models.user import User
from almoxarifado.schemas.user import UserResponse, LoginRequest, LoginResponse, TokenRefresh, Token
from almoxarifado.services import users as user_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT tokens.

    - **email**: User's email address
    - **password**: User's password
    """
    user = user_service.authenticate(db, credentials.email, credentials.password)

    return LoginResponse(
        access_token=create_access_token(subject=user.id, additional_claims={"role": user.role}),
        refresh_token=create_refresh_token(subject=user.id),
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )


@router.post("/refresh", response_model=Token)
def refresh_token(
    token_data: TokenRefresh,
    db: Session = Depends(get_db)
):
    """Exchange a refresh token for a new token pair."""
    user_id = verify_refresh_token(token_data.refresh_token)

    # Verify user still exists and is active
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise UnauthenticatedError("Invalid refresh token")

    return Token(
        access_token=create_access_token(subject=user.id, additional_claims={"role": user.role}),
        refresh_token=create_refresh_token(subject=user.id),
        token_type="bearer"
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Current authenticated user's profile."""
    return current_user
