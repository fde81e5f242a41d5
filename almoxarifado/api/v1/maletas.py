"""
Loan ("maleta") API endpoints.

Every read catches up on overdue status first.
"""
from typing import Optional
import uuid
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from almoxarifado.core.database import get_db
from almoxarifado.core.security import get_current_user, require_roles
from almoxarifado.models.loan import LoanStatus
from almoxarifado.models.user import User, UserRole
from almoxarifado.schemas.loan import (
    LoanCreate,
    LoanCreated,
    LoanResponse,
    LoanDetail,
    LoanStats,
    SweepResult
)
from almoxarifado.services import loans

router = APIRouter(prefix="/maletas", tags=["Loans"])


@router.post("", response_model=LoanCreated, status_code=status.HTTP_201_CREATED)
def create_loan(
    body: LoanCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """
    Check out a case of items to a custodian.

    Fails as a whole if any line asks for more than is in stock.
    """
    loan = loans.create_loan(
        db,
        custodian_id=body.custodian_id,
        due_date=body.due_date,
        creator_id=current_user.id,
        lines=body.lines,
        notes=body.notes
    )
    return LoanCreated(id=loan.id)


@router.get("", response_model=list[LoanResponse])
def list_loans(
    status: Optional[LoanStatus] = None,
    custodian_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Loans newest first."""
    return [loans.to_response(loan) for loan in loans.list_loans(db, status=status, custodian_id=custodian_id)]


@router.get("/stats", response_model=LoanStats)
def loan_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Open and overdue counts and the total quantity out on loan."""
    return loans.compute_loan_stats(db)


@router.post("/sweep", response_model=SweepResult)
def sweep_loans(
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """Mark open loans past their due date as overdue."""
    return SweepResult(updated=loans.sweep_overdue_loans(db))


@router.get("/{loan_id}", response_model=LoanDetail)
def get_loan(
    loan_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Loan with its lines."""
    return loans.to_detail(loans.get_loan(db, loan_id))


@router.post("/{loan_id}/return", status_code=status.HTTP_204_NO_CONTENT)
def return_loan(
    loan_id: uuid.UUID,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.OPERATOR)),
    db: Session = Depends(get_db)
):
    """Return every item of the loan to stock."""
    loans.return_loan(db, loan_id, acting_user_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
