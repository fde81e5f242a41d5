"""
Loan ("maleta") models: checked-out bundles of stock items.
"""
from typing import Optional
import uuid
from enum import Enum
from datetime import date, datetime
from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, Index, Text, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from almoxarifado.core.database import Base, utcnow


class LoanStatus(str, Enum):
    """Loan lifecycle states. RETURNED is terminal."""
    OPEN = "open"
    OVERDUE = "overdue"
    RETURNED = "returned"


class Loan(Base):
    """Equipment case checked out to a custodian."""

    __tablename__ = "loans"

    # Foreign keys
    custodian_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False
    )
    returned_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Dates
    loan_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=LoanStatus.OPEN.value,
        nullable=False
    )  # 'open', 'overdue', 'returned'
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    custodian = relationship("User", foreign_keys=[custodian_id])
    creator = relationship("User", foreign_keys=[creator_id])
    lines = relationship(
        "LoanLine",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="LoanLine.created_at"
    )

    # Indexes
    __table_args__ = (
        CheckConstraint("status IN ('open', 'overdue', 'returned')", name="status_valid"),
        Index("idx_loans_status", "status"),
        Index("idx_loans_open_due", "status", "due_date"),
        Index("idx_loans_custodian", "custodian_id"),
    )

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, status={self.status}, due={self.due_date})>"

    @property
    def is_active(self) -> bool:
        """True while the loan still holds stock."""
        return self.status in (LoanStatus.OPEN.value, LoanStatus.OVERDUE.value)


class LoanLine(Base):
    """One item and quantity held by a loan. Immutable after creation."""

    __tablename__ = "loan_lines"

    # Foreign keys
    loan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("loans.id", ondelete="CASCADE"),
        nullable=False
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    serial_number: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Relationships
    loan = relationship("Loan", back_populates="lines")
    item = relationship("StockItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        Index("idx_loan_lines_loan", "loan_id"),
        Index("idx_loan_lines_item", "item_id"),
    )

    def __repr__(self) -> str:
        return f"<LoanLine(id={self.id}, loan={self.loan_id}, item={self.item_id}, qty={self.quantity})>"
