"""
Dashboard API endpoints for summary statistics.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db, utcnow
from almoxarifado.core.security import get_current_user
from almoxarifado.models.category import Category
from almoxarifado.models.item import StockItem
from almoxarifado.models.movement import Movement
from almoxarifado.models.user import User
from almoxarifado.schemas.dashboard import DashboardSummary
from almoxarifado.schemas.item import ItemResponse
from almoxarifado.schemas.movement import MovementResponse
from almoxarifado.services import catalog, ledger, loans

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
def get_dashboard_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Dashboard summary: item, category and movement totals, low stock items,
    the latest movements and loan counters.
    """
    total_items = db.scalar(
        select(func.count(StockItem.id)).where(StockItem.active.is_(True))
    ) or 0
    total_categories = db.scalar(
        select(func.count(Category.id)).where(Category.active.is_(True))
    ) or 0
    total_movements = db.scalar(select(func.count(Movement.id))) or 0

    return DashboardSummary(
        total_items=total_items,
        total_categories=total_categories,
        total_movements=total_movements,
        low_stock_items=[ItemResponse.model_validate(i) for i in catalog.low_stock_items(db)],
        recent_movements=[MovementResponse.model_validate(m) for m in ledger.query_movements(db, limit=5)],
        loans=loans.compute_loan_stats(db),
        last_updated=utcnow()
    )
