"""
Security utilities for authentication and authorization.
Handles JWT tokens, password hashing, and user verification.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from almoxarifado.core.config import settings
from almoxarifado.core.database import get_db
from almoxarifado.error_handlers import UnauthenticatedError, PermissionDeniedError


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer token scheme; missing credentials are reported as UnauthenticatedError
security_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: User ID or identifier
        expires_delta: Token expiration time
        additional_claims: Extra data to include in token

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "type": "access",
        "iat": now
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def create_refresh_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT refresh token."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days))

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "type": "refresh",
        "iat": now
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token.

    Raises:
        UnauthenticatedError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise UnauthenticatedError("Could not validate credentials")


def _subject_id(payload: dict[str, Any], expected_type: str) -> uuid.UUID:
    if payload.get("type", "access") != expected_type:
        raise UnauthenticatedError(f"Invalid token type. {expected_type.capitalize()} token required.")

    user_id_str = payload.get("sub")
    if user_id_str is None:
        raise UnauthenticatedError("Invalid authentication credentials")

    try:
        return uuid.UUID(user_id_str)
    except ValueError:
        raise UnauthenticatedError("Invalid user ID in token")


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme)
) -> uuid.UUID:
    """Extract and validate the acting user's ID from the bearer token."""
    if credentials is None:
        raise UnauthenticatedError()

    return _subject_id(decode_token(credentials.credentials), "access")


def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get the current authenticated user from database.

    Raises:
        UnauthenticatedError: If the user no longer exists or was deactivated
    """
    # Import here to avoid circular dependency
    from almoxarifado.models.user import User

    user = db.get(User, user_id)

    if user is None or not user.is_active:
        raise UnauthenticatedError("User not found or inactive")

    return user


def require_roles(*roles: str):
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.post("", dependencies=[Depends(require_roles("ADMIN"))])
    """
    allowed = [r.value if hasattr(r, "value") else r for r in roles]

    def checker(current_user=Depends(get_current_user)):
        if current_user.role not in allowed:
            raise PermissionDeniedError(current_user.role, allowed)
        return current_user

    return checker


def verify_refresh_token(token: str) -> uuid.UUID:
    """Verify a refresh token and extract user ID."""
    return _subject_id(decode_token(token), "refresh")
