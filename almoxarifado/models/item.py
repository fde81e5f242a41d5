"""
Stock item model for inventory management.
"""
from typing import Optional
import uuid
from enum import Enum
from sqlalchemy import String, Integer, Boolean, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from almoxarifado.core.database import Base


class ItemCondition(str, Enum):
    """Physical condition of an item."""
    NEW = "new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DAMAGED = "damaged"


class StockItem(Base):
    """Stock item with its current quantity counter."""

    __tablename__ = "items"

    # Foreign keys
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True
    )

    # Identification
    barcode: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    brand: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    model: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    serial_number: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Stock information
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    # Additional information
    condition: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Status
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="items")
    movements = relationship("Movement", back_populates="item")

    # Indexes
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("min_quantity >= 0", name="min_quantity_non_negative"),
        Index("idx_items_category", "category_id"),
        Index("idx_items_low_stock", "active", "quantity"),
    )

    def __repr__(self) -> str:
        return f"<StockItem(id={self.id}, barcode={self.barcode}, name={self.name}, qty={self.quantity})>"

    @property
    def is_low_stock(self) -> bool:
        """Check if item stock is at or below its minimum."""
        return self.quantity <= self.min_quantity
