"""
Pydantic schemas for the movement ledger.
"""
from typing import Optional
from datetime import date, datetime
import uuid
from pydantic import BaseModel, Field, ConfigDict

from almoxarifado.models.movement import MovementType


class MovementCreate(BaseModel):
    """Schema for recording a movement. The acting user comes from the token."""
    item_id: uuid.UUID
    type: MovementType
    quantity: int = Field(..., gt=0)
    note: Optional[str] = Field(None, max_length=1000)


class MovementItem(BaseModel):
    """Item display fields carried on movement rows."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    barcode: str
    brand: str
    model: str
    quantity: int
    min_quantity: int


class MovementUser(BaseModel):
    """User display fields carried on movement rows."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str


class MovementResponse(BaseModel):
    """Schema for movement response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: MovementType
    quantity: int
    item_id: uuid.UUID
    user_id: uuid.UUID
    note: Optional[str] = None
    created_at: datetime
    item: Optional[MovementItem] = None
    user: Optional[MovementUser] = None


class MovementAggregate(BaseModel):
    """Entries, exits and running balance for one day."""
    data: date
    label: str  # DD/MM
    entradas: int
    saidas: int
    saldo: int
