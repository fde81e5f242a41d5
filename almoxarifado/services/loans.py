"""
Loan ("maleta") lifecycle.

    open --(due date passes, detected by sweep)--> overdue
    open | overdue --(return)--> returned (terminal)

Creating a loan withdraws the stock of every line; returning it puts the
same quantities back. Both happen in a single transaction.
"""
from typing import Optional, Iterable
from collections import defaultdict
from datetime import date
import uuid
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, update, func, desc
from sqlalchemy.orm import Session, selectinload

from almoxarifado.core.config import settings
from almoxarifado.core.database import transaction, utcnow
from almoxarifado.error_handlers import (
    InvalidStateError,
    ResourceNotFoundError,
    UnauthenticatedError,
    ValidationError
)
from almoxarifado.logging_config import get_logger
from almoxarifado.models.loan import Loan, LoanLine, LoanStatus
from almoxarifado.schemas.loan import LoanLineCreate, LoanResponse, LoanDetail, LoanLineResponse, LoanStats
from almoxarifado.services.audit import log_action
from almoxarifado.services.ledger import adjust_stock, lock_item, validate_quantity
from almoxarifado.services.users import get_active_user

logger = get_logger("loans")

ACTIVE_STATUSES = (LoanStatus.OPEN.value, LoanStatus.OVERDUE.value)


def _coerce_lines(lines: Iterable) -> list[LoanLineCreate]:
    coerced = []
    for index, line in enumerate(lines or []):
        if isinstance(line, LoanLineCreate):
            coerced.append(line)
            continue
        try:
            coerced.append(LoanLineCreate.model_validate(line))
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid loan line at position {index}",
                field=f"lines[{index}]",
                errors=[{"field": f"lines[{index}]", "message": str(exc)}]
            )
    return coerced


def create_loan(
    db: Session,
    custodian_id: uuid.UUID,
    due_date: date,
    creator_id: Optional[uuid.UUID],
    lines: Iterable,
    notes: Optional[str] = None
) -> Loan:
    """
    Open a loan and withdraw the stock of all its lines.

    All-or-nothing: if any line cannot be satisfied no loan, line or stock
    change is left behind. Lines repeating an item are checked against
    their combined quantity.
    """
    if creator_id is None:
        raise UnauthenticatedError()

    lines = _coerce_lines(lines)
    if not lines:
        raise ValidationError("A loan needs at least one line", field="lines")

    for index, line in enumerate(lines):
        validate_quantity(line.quantity, field=f"lines[{index}].quantity")

    if due_date < utcnow().date():
        raise ValidationError("Due date cannot be in the past", field="due_date")

    requested: dict[uuid.UUID, int] = defaultdict(int)
    for line in lines:
        requested[line.item_id] += line.quantity

    with transaction(db, "create_loan"):
        creator = get_active_user(db, creator_id)
        custodian = get_active_user(db, custodian_id)

        # Fixed lock order keeps concurrent loans from deadlocking
        for item_id in sorted(requested, key=str):
            item = lock_item(db, item_id)
            adjust_stock(db, item, -requested[item_id])

        loan = Loan(
            custodian_id=custodian.id,
            creator_id=creator.id,
            loan_date=utcnow(),
            due_date=due_date,
            status=LoanStatus.OPEN.value,
            notes=notes or None,
            lines=[
                LoanLine(
                    item_id=line.item_id,
                    quantity=line.quantity,
                    serial_number=line.serial_number or None
                )
                for line in lines
            ]
        )
        db.add(loan)
        db.flush()

    logger.info(
        f"[LOAN] Created loan={loan.id} for custodian={custodian.id} "
        f"with {len(lines)} line(s), due {due_date}"
    )

    log_action(
        db, creator, "LOAN_CREATED", "loans", loan.id,
        {
            "custodian_id": str(custodian.id),
            "due_date": due_date.isoformat(),
            "lines": [
                {"item_id": str(line.item_id), "quantity": line.quantity}
                for line in lines
            ]
        }
    )

    return loan


def return_loan(db: Session, loan_id: uuid.UUID, acting_user_id: Optional[uuid.UUID]) -> Loan:
    """
    Close an open or overdue loan and restock every line.

    Raises:
        ResourceNotFoundError: loan does not exist
        InvalidStateError: loan was already returned
    """
    if acting_user_id is None:
        raise UnauthenticatedError()

    with transaction(db, "return_loan"):
        actor = get_active_user(db, acting_user_id)

        loan = db.execute(
            select(Loan)
            .where(Loan.id == loan_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if loan is None:
            raise ResourceNotFoundError("Loan", loan_id)

        # Guarded transition; a concurrent return leaves nothing to update
        returned_at = utcnow()
        result = db.execute(
            update(Loan)
            .where(Loan.id == loan.id, Loan.status.in_(ACTIVE_STATUSES))
            .values(status=LoanStatus.RETURNED.value, return_date=returned_at, returned_by=actor.id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateError("loan", loan.status, "return")

        for line in sorted(loan.lines, key=lambda l: str(l.item_id)):
            item = lock_item(db, line.item_id, require_active=False)
            adjust_stock(db, item, line.quantity)

        db.refresh(loan)

    logger.info(f"[LOAN] Returned loan={loan.id} by user={actor.id}")

    log_action(
        db, actor, "LOAN_RETURNED", "loans", loan.id,
        {"lines": [{"item_id": str(l.item_id), "quantity": l.quantity} for l in loan.lines]}
    )

    return loan


def sweep_overdue_loans(db: Session, today: Optional[date] = None) -> int:
    """
    Mark open loans whose due date has passed as overdue.

    Idempotent; overdue and returned loans are untouched.

    Returns:
        Number of loans that changed status
    """
    today = today or utcnow().date()

    with transaction(db, "sweep_overdue_loans"):
        result = db.execute(
            update(Loan)
            .where(Loan.status == LoanStatus.OPEN.value, Loan.due_date < today)
            .values(status=LoanStatus.OVERDUE.value)
            .execution_options(synchronize_session="evaluate")
        )

    if result.rowcount:
        logger.info(f"[SWEEP] Marked {result.rowcount} loan(s) overdue (due before {today})")

    return result.rowcount


def _sweep_before_read(db: Session) -> None:
    if settings.sweep_on_read:
        sweep_overdue_loans(db)


def list_loans(
    db: Session,
    status: Optional[str] = None,
    custodian_id: Optional[uuid.UUID] = None
) -> list[Loan]:
    """Loans newest first, after catching up on overdue status."""
    _sweep_before_read(db)

    query = (
        select(Loan)
        .options(selectinload(Loan.custodian), selectinload(Loan.creator))
        .order_by(desc(Loan.created_at))
    )
    if status:
        try:
            status = LoanStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid loan status '{status}'", field="status")
        query = query.where(Loan.status == status.value)
    if custodian_id:
        query = query.where(Loan.custodian_id == custodian_id)

    return list(db.scalars(query).all())


def get_loan(db: Session, loan_id: uuid.UUID) -> Loan:
    """Single loan with its lines and their items."""
    _sweep_before_read(db)

    loan = db.scalars(
        select(Loan)
        .where(Loan.id == loan_id)
        .options(
            selectinload(Loan.custodian),
            selectinload(Loan.creator),
            selectinload(Loan.lines).selectinload(LoanLine.item)
        )
    ).one_or_none()

    if loan is None:
        raise ResourceNotFoundError("Loan", loan_id)

    return loan


def compute_loan_stats(db: Session) -> LoanStats:
    """Open and overdue counts plus the quantity currently out on loan."""
    _sweep_before_read(db)

    counts = dict(
        db.execute(
            select(Loan.status, func.count(Loan.id)).group_by(Loan.status)
        ).all()
    )

    on_loan = db.execute(
        select(func.coalesce(func.sum(LoanLine.quantity), 0))
        .join(Loan, LoanLine.loan_id == Loan.id)
        .where(Loan.status.in_(ACTIVE_STATUSES))
    ).scalar_one()

    return LoanStats(
        abertas=counts.get(LoanStatus.OPEN.value, 0),
        atrasadas=counts.get(LoanStatus.OVERDUE.value, 0),
        itens_emprestados=int(on_loan)
    )


def to_response(loan: Loan) -> LoanResponse:
    """Read model with custodian and creator display fields."""
    return LoanResponse(
        id=loan.id,
        custodian_id=loan.custodian_id,
        custodian_name=loan.custodian.name if loan.custodian else None,
        custodian_email=loan.custodian.email if loan.custodian else None,
        loan_date=loan.loan_date,
        due_date=loan.due_date,
        return_date=loan.return_date,
        status=loan.status,
        notes=loan.notes,
        creator_id=loan.creator_id,
        creator_name=loan.creator.name if loan.creator else None,
        returned_by=loan.returned_by,
        created_at=loan.created_at,
        updated_at=loan.updated_at
    )


def to_detail(loan: Loan) -> LoanDetail:
    """Read model including lines with item display fields."""
    lines = [
        LoanLineResponse(
            id=line.id,
            loan_id=line.loan_id,
            item_id=line.item_id,
            quantity=line.quantity,
            serial_number=line.serial_number,
            created_at=line.created_at,
            item_name=line.item.name if line.item else None,
            item_barcode=line.item.barcode if line.item else None,
            item_brand=line.item.brand if line.item else None,
            item_model=line.item.model if line.item else None
        )
        for line in loan.lines
    ]
    return LoanDetail(**to_response(loan).model_dump(), lines=lines)
