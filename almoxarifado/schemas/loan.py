"""
Pydantic schemas for loans ("maletas").
"""
from typing import Optional
from datetime import date, datetime
import uuid
from pydantic import BaseModel, Field, ConfigDict

from almoxarifado.models.loan import LoanStatus


class LoanLineCreate(BaseModel):
    """One requested item in a new loan."""
    item_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    serial_number: Optional[str] = Field(None, max_length=255)


class LoanCreate(BaseModel):
    """Schema for creating a loan. The creator comes from the token."""
    custodian_id: uuid.UUID
    due_date: date
    notes: Optional[str] = Field(None, max_length=2000)
    lines: list[LoanLineCreate] = Field(..., min_length=1)


class LoanCreated(BaseModel):
    """Identity of a new loan."""
    id: uuid.UUID


class LoanLineResponse(BaseModel):
    """Loan line with resolved item display fields."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    loan_id: uuid.UUID
    item_id: uuid.UUID
    quantity: int
    serial_number: Optional[str] = None
    created_at: datetime
    item_name: Optional[str] = None
    item_barcode: Optional[str] = None
    item_brand: Optional[str] = None
    item_model: Optional[str] = None


class LoanResponse(BaseModel):
    """Loan with resolved custodian and creator names."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    custodian_id: uuid.UUID
    custodian_name: Optional[str] = None
    custodian_email: Optional[str] = None
    loan_date: datetime
    due_date: date
    return_date: Optional[datetime] = None
    status: LoanStatus
    notes: Optional[str] = None
    creator_id: uuid.UUID
    creator_name: Optional[str] = None
    returned_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class LoanDetail(LoanResponse):
    """Loan with its lines."""
    lines: list[LoanLineResponse] = []


class LoanStats(BaseModel):
    """Loan counters for the dashboard."""
    model_config = ConfigDict(populate_by_name=True)

    abertas: int
    atrasadas: int
    itens_emprestados: int = Field(..., serialization_alias="itensEmprestados")


class SweepResult(BaseModel):
    """Outcome of an overdue sweep."""
    updated: int
