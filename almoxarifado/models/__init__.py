"""
SQLAlchemy models for the Almoxarifado application.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from almoxarifado.models.user import User, UserRole
from almoxarifado.models.category import Category
from almoxarifado.models.item import StockItem, ItemCondition
from almoxarifado.models.movement import Movement, MovementType
from almoxarifado.models.loan import Loan, LoanLine, LoanStatus
from almoxarifado.models.audit import AuditLog

__all__ = [
    "User",
    "UserRole",
    "Category",
    "StockItem",
    "ItemCondition",
    "Movement",
    "MovementType",
    "Loan",
    "LoanLine",
    "LoanStatus",
    "AuditLog",
]
