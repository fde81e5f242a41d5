"""
Pydantic schemas for request/response validation.
"""
from almoxarifado.schemas.user import (
    UserBase, UserCreate, UserUpdate, PasswordReset, UserResponse,
    Token, TokenRefresh, LoginRequest, LoginResponse
)
from almoxarifado.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from almoxarifado.schemas.item import ItemBase, ItemCreate, ItemUpdate, ItemResponse, CategorySummary
from almoxarifado.schemas.movement import (
    MovementCreate, MovementItem, MovementUser, MovementResponse, MovementAggregate
)
from almoxarifado.schemas.loan import (
    LoanLineCreate, LoanCreate, LoanCreated, LoanLineResponse,
    LoanResponse, LoanDetail, LoanStats, SweepResult
)
from almoxarifado.schemas.audit import AuditLogResponse
from almoxarifado.schemas.dashboard import DashboardSummary, HealthCheck

__all__ = [
    # User schemas
    "UserBase", "UserCreate", "UserUpdate", "PasswordReset", "UserResponse",
    "Token", "TokenRefresh", "LoginRequest", "LoginResponse",

    # Catalog schemas
    "CategoryCreate", "CategoryUpdate", "CategoryResponse",
    "ItemBase", "ItemCreate", "ItemUpdate", "ItemResponse", "CategorySummary",

    # Ledger schemas
    "MovementCreate", "MovementItem", "MovementUser", "MovementResponse", "MovementAggregate",

    # Loan schemas
    "LoanLineCreate", "LoanCreate", "LoanCreated", "LoanLineResponse",
    "LoanResponse", "LoanDetail", "LoanStats", "SweepResult",

    # Audit / dashboard schemas
    "AuditLogResponse", "DashboardSummary", "HealthCheck",
]
