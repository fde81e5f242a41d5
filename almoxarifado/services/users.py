"""
User administration and credential checks.
"""
from typing import Optional
import uuid
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from almoxarifado.core.database import transaction
from almoxarifado.core.security import get_password_hash, verify_password
from almoxarifado.error_handlers import DuplicateResourceError, ResourceNotFoundError, UnauthenticatedError
from almoxarifado.logging_config import get_logger
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.user import UserCreate, UserUpdate
from almoxarifado.services.audit import log_action

logger = get_logger("users")


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the active user owning these credentials."""
    user = db.scalar(select(User).where(func.lower(User.email) == email.lower()))

    if user is None or not verify_password(password, user.password_hash):
        logger.warning(f"[USERS] Failed login for {email}")
        raise UnauthenticatedError("Incorrect email or password")

    if not user.is_active:
        logger.warning(f"[USERS] Login attempt by inactive user {email}")
        raise UnauthenticatedError("User account is inactive")

    return user


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


def get_active_user(db: Session, user_id: uuid.UUID) -> User:
    """Users acting on stock or holding loans must exist and be active."""
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise ResourceNotFoundError("User", user_id)
    return user


def list_users(db: Session, include_inactive: bool = True) -> list[User]:
    query = select(User).order_by(User.name)
    if not include_inactive:
        query = query.where(User.is_active.is_(True))
    return list(db.scalars(query).all())


def create_user(db: Session, data: UserCreate, actor=None, ip_address: Optional[str] = None) -> User:
    email = data.email.lower()

    with transaction(db, "create_user"):
        if db.scalar(select(User.id).where(func.lower(User.email) == email)) is not None:
            raise DuplicateResourceError("User", "email", email)

        user = User(
            email=email,
            name=data.name,
            password_hash=get_password_hash(data.password),
            role=UserRole(data.role).value,
            is_active=True
        )
        db.add(user)
        db.flush()

    logger.info(f"[USERS] Created user={user.id} {email} role={user.role}")
    log_action(
        db, actor, "USER_CREATED", "users", user.id,
        {"email": email, "name": user.name, "role": user.role},
        ip_address=ip_address
    )
    return user


def update_user(
    db: Session,
    user_id: uuid.UUID,
    data: UserUpdate,
    actor=None,
    ip_address: Optional[str] = None
) -> User:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in changes:
        changes["role"] = UserRole(changes["role"]).value

    with transaction(db, "update_user"):
        user = get_user(db, user_id)
        for field, value in changes.items():
            setattr(user, field, value)

    if changes:
        logger.info(f"[USERS] Updated user={user.id}: {changes}")
        log_action(db, actor, "USER_UPDATED", "users", user.id, changes, ip_address=ip_address)
    return user


def reset_password(
    db: Session,
    user_id: uuid.UUID,
    new_password: str,
    actor=None,
    ip_address: Optional[str] = None
) -> None:
    with transaction(db, "reset_password"):
        user = get_user(db, user_id)
        user.password_hash = get_password_hash(new_password)

    logger.info(f"[USERS] Password reset for user={user.id}")
    log_action(
        db, actor, "PASSWORD_RESET", "users", user.id,
        {"reset_by": getattr(actor, "email", None)},
        ip_address=ip_address
    )
