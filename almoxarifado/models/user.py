"""
User model for authentication and authorization.
"""
from enum import Enum
from sqlalchemy import String, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from almoxarifado.core.database import Base


class UserRole(str, Enum):
    """Access roles."""
    ADMIN = "ADMIN"
    OPERATOR = "OPERATOR"
    VIEWER = "VIEWER"


class User(Base):
    """User account model."""

    __tablename__ = "users"

    # User credentials
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile information
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Role and permissions
    role: Mapped[str] = mapped_column(String(20), default=UserRole.OPERATOR.value, nullable=False)

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    movements = relationship("Movement", back_populates="user")

    __table_args__ = (
        Index("idx_users_role", "role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
