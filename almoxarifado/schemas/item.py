"""
Pydantic schemas for StockItem model.
"""
from typing import Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, Field, ConfigDict, field_validator

from almoxarifado.models.item import ItemCondition


class ItemBase(BaseModel):
    """Base item schema."""
    name: str = Field(..., min_length=1, max_length=500)
    brand: str = Field(default="", max_length=255)
    model: str = Field(default="", max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    min_quantity: int = Field(default=0, ge=0)
    location: str = Field(default="", max_length=255)
    category_id: Optional[uuid.UUID] = None
    condition: Optional[ItemCondition] = None
    photo_url: Optional[str] = None


class ItemCreate(ItemBase):
    """Schema for creating an item. Initial stock is set here only."""
    quantity: int = Field(default=0, ge=0)


class ItemUpdate(BaseModel):
    """Schema for updating an item. Quantity changes go through movements."""
    name: Optional[str] = Field(None, min_length=1, max_length=500)
    brand: Optional[str] = Field(None, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    min_quantity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=255)
    category_id: Optional[uuid.UUID] = None
    condition: Optional[ItemCondition] = None
    photo_url: Optional[str] = None

    @field_validator("name", "brand", "model", "min_quantity", "location")
    @classmethod
    def not_null(cls, value, info):
        """These columns may be omitted but never cleared."""
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class CategorySummary(BaseModel):
    """Category embedded in item responses."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    active: bool


class ItemResponse(ItemBase):
    """Schema for item response."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    barcode: str
    quantity: int
    active: bool
    is_low_stock: bool
    category: Optional[CategorySummary] = None
    created_at: datetime
    updated_at: datetime
