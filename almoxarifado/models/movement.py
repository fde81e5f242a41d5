"""
Movement model: the append-only stock ledger.
"""
from typing import Optional
import uuid
from enum import Enum
from sqlalchemy import String, Integer, ForeignKey, Index, Text, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from almoxarifado.core.database import Base


class MovementType(str, Enum):
    """Direction of a stock movement."""
    ENTRY = "ENTRY"
    EXIT = "EXIT"


class Movement(Base):
    """A single entry or exit recorded against one item. Never updated."""

    __tablename__ = "movements"

    # Foreign keys
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False
    )

    # Movement details
    type: Mapped[str] = mapped_column(String(10), nullable=False)  # 'ENTRY', 'EXIT'
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    item = relationship("StockItem", back_populates="movements")
    user = relationship("User", back_populates="movements")

    # Indexes
    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        CheckConstraint("type IN ('ENTRY', 'EXIT')", name="type_valid"),
        Index("idx_movements_item", "item_id"),
        Index("idx_movements_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Movement(id={self.id}, type={self.type}, qty={self.quantity})>"
