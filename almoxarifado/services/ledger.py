"""
Movement ledger: append-only stock entries/exits and their day-by-day balance.

Every stock counter change goes through `adjust_stock`, a guarded UPDATE that
only decrements when enough stock is left, so the check and the write are one
statement and concurrent exits cannot overdraw an item.
"""
from typing import Optional, Iterable
import uuid
from datetime import date, datetime, time, timezone
import pandas as pd
from sqlalchemy import select, update, desc
from sqlalchemy.orm import Session, joinedload

from almoxarifado.core.database import transaction
from almoxarifado.error_handlers import (
    InsufficientStockError,
    ResourceNotFoundError,
    UnauthenticatedError,
    ValidationError
)
from almoxarifado.logging_config import get_logger
from almoxarifado.models.item import StockItem
from almoxarifado.models.movement import Movement, MovementType
from almoxarifado.services.audit import log_action
from almoxarifado.services.users import get_active_user

logger = get_logger("ledger")


def validate_quantity(quantity, field: str = "quantity") -> int:
    """Quantities are positive integers."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer", field=field)
    return quantity


def lock_item(db: Session, item_id: uuid.UUID, require_active: bool = True) -> StockItem:
    """Load an item with a row lock held until the transaction ends."""
    item = db.execute(
        select(StockItem)
        .where(StockItem.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()

    if item is None or (require_active and not item.active):
        raise ResourceNotFoundError("Item", item_id)

    return item


def adjust_stock(db: Session, item: StockItem, delta: int) -> StockItem:
    """
    Apply `delta` to an item's quantity.

    Negative deltas only apply while quantity >= -delta; otherwise
    InsufficientStockError is raised and nothing changes.
    """
    stmt = update(StockItem).where(StockItem.id == item.id)
    if delta < 0:
        stmt = stmt.where(StockItem.quantity >= -delta)
    stmt = stmt.values(quantity=StockItem.quantity + delta).execution_options(
        synchronize_session=False
    )

    result = db.execute(stmt)
    if result.rowcount != 1:
        raise InsufficientStockError(item.id, available=item.quantity, requested=-delta)

    db.refresh(item)
    return item


def record_movement(
    db: Session,
    item_id: uuid.UUID,
    movement_type,
    quantity: int,
    user_id: Optional[uuid.UUID],
    note: Optional[str] = None
) -> Movement:
    """
    Record an ENTRY or EXIT and apply it to the item's stock atomically.

    Raises:
        UnauthenticatedError: no acting user
        ValidationError: bad type or non-positive quantity
        ResourceNotFoundError: item or user missing or inactive
        InsufficientStockError: EXIT larger than the current quantity
    """
    if user_id is None:
        raise UnauthenticatedError()

    try:
        movement_type = MovementType(movement_type)
    except ValueError:
        raise ValidationError(f"Invalid movement type '{movement_type}'", field="type")

    validate_quantity(quantity)

    with transaction(db, "record_movement"):
        user = get_active_user(db, user_id)

        item = lock_item(db, item_id)
        delta = quantity if movement_type == MovementType.ENTRY else -quantity
        adjust_stock(db, item, delta)

        movement = Movement(
            item_id=item.id,
            user_id=user.id,
            type=movement_type.value,
            quantity=quantity,
            note=note or None
        )
        db.add(movement)
        db.flush()

    logger.info(
        f"[LEDGER] {movement_type.value} {quantity} of item={item.id} "
        f"by user={user.id}, stock now {item.quantity}"
    )

    log_action(
        db, user, "MOVEMENT_CREATED", "movements", movement.id,
        {
            "type": movement_type.value,
            "quantity": quantity,
            "item_id": str(item.id),
            "item_name": item.name,
            "stock_after": item.quantity
        }
    )

    return movement


def query_movements(
    db: Session,
    item_id: Optional[uuid.UUID] = None,
    limit: Optional[int] = None
) -> list[Movement]:
    """Movements newest first, with item and user loaded for display."""
    query = (
        select(Movement)
        .options(joinedload(Movement.item), joinedload(Movement.user))
        .order_by(desc(Movement.created_at))
    )

    if item_id:
        query = query.where(Movement.item_id == item_id)

    if limit:
        query = query.limit(limit)

    return list(db.scalars(query).all())


def _start_of(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _end_of_day(value: date | datetime) -> datetime:
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=timezone.utc)


def bucket_movements(rows: Iterable) -> list[dict]:
    """
    Group movements by calendar day and fold a running balance.

    `rows` carry `type`, `quantity` and `created_at`. The balance starts at
    zero for the first day in `rows`:
        saldo[i] = saldo[i-1] + entradas[i] - saidas[i]
    """
    records = [
        {"day": r.created_at.date(), "type": r.type, "quantity": r.quantity}
        for r in rows
    ]
    if not records:
        return []

    df = pd.DataFrame(records)
    is_entry = df["type"] == MovementType.ENTRY.value
    df["entradas"] = df["quantity"].where(is_entry, 0)
    df["saidas"] = df["quantity"].where(~is_entry, 0)

    daily = df.groupby("day", sort=True)[["entradas", "saidas"]].sum().reset_index()
    daily["saldo"] = (daily["entradas"] - daily["saidas"]).cumsum()

    return [
        {
            "data": row.day,
            "label": row.day.strftime("%d/%m"),
            "entradas": int(row.entradas),
            "saidas": int(row.saidas),
            "saldo": int(row.saldo),
        }
        for row in daily.itertuples(index=False)
    ]


def aggregate_movimentacao(
    db: Session,
    item_id: Optional[uuid.UUID] = None,
    category_id: Optional[uuid.UUID] = None,
    start_date: Optional[date | datetime] = None,
    end_date: Optional[date | datetime] = None
) -> list[dict]:
    """
    Daily entries, exits and running balance over a filtered window.

    An item filter overrides a category filter. A category with no items
    yields an empty result. Both date bounds are inclusive; the end bound
    covers the whole end day.
    """
    query = (
        select(Movement.type, Movement.quantity, Movement.created_at)
        .order_by(Movement.created_at)
    )

    if item_id:
        query = query.where(Movement.item_id == item_id)
    elif category_id:
        item_ids = db.scalars(
            select(StockItem.id).where(StockItem.category_id == category_id)
        ).all()
        if not item_ids:
            return []
        query = query.where(Movement.item_id.in_(item_ids))

    if start_date:
        query = query.where(Movement.created_at >= _start_of(start_date))

    if end_date:
        query = query.where(Movement.created_at <= _end_of_day(end_date))

    return bucket_movements(db.execute(query).all())
