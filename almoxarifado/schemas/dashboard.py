"""
Pydantic schemas for Dashboard endpoints.
"""
from datetime import datetime
from pydantic import BaseModel

from almoxarifado.schemas.item import ItemResponse
from almoxarifado.schemas.loan import LoanStats
from almoxarifado.schemas.movement import MovementResponse


class DashboardSummary(BaseModel):
    """Dashboard summary with key metrics."""
    total_items: int
    total_categories: int
    total_movements: int
    low_stock_items: list[ItemResponse]
    recent_movements: list[MovementResponse]
    loans: LoanStats

    # Time info
    last_updated: datetime


class HealthCheck(BaseModel):
    """Health check response."""
    status: str
    version: str
    database: str
    timestamp: datetime
