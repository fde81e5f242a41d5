"""
Catalog: categories and stock items.

Items are never deleted, only deactivated, and their quantity is not
editable here; stock changes go through the ledger or loans.
"""
from typing import Optional
import uuid
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, selectinload

from almoxarifado.core.config import settings
from almoxarifado.core.database import transaction, utcnow
from almoxarifado.error_handlers import DuplicateResourceError, ResourceNotFoundError
from almoxarifado.logging_config import get_logger
from almoxarifado.models.category import Category
from almoxarifado.models.item import StockItem
from almoxarifado.schemas.item import ItemCreate, ItemUpdate
from almoxarifado.services.audit import log_action

logger = get_logger("catalog")


# -----------------------------
# Categories
# -----------------------------
def get_category(db: Session, category_id: uuid.UUID) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise ResourceNotFoundError("Category", category_id)
    return category


def _ensure_unique_category_name(db: Session, name: str, exclude_id: Optional[uuid.UUID] = None) -> None:
    query = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id:
        query = query.where(Category.id != exclude_id)
    if db.scalar(query) is not None:
        raise DuplicateResourceError("Category", "name", name)


def create_category(db: Session, name: str, actor=None) -> Category:
    name = name.strip()
    with transaction(db, "create_category"):
        _ensure_unique_category_name(db, name)
        category = Category(name=name, active=True)
        db.add(category)
        db.flush()

    logger.info(f"[CATALOG] Created category={category.id} '{name}'")
    log_action(db, actor, "CATEGORY_CREATED", "categories", category.id, {"name": name})
    return category


def update_category(
    db: Session,
    category_id: uuid.UUID,
    name: Optional[str] = None,
    active: Optional[bool] = None,
    actor=None
) -> Category:
    changes = {}
    with transaction(db, "update_category"):
        category = get_category(db, category_id)
        if name is not None and name.strip() != category.name:
            _ensure_unique_category_name(db, name.strip(), exclude_id=category.id)
            category.name = changes["name"] = name.strip()
        if active is not None and active != category.active:
            category.active = changes["active"] = active

    if changes:
        logger.info(f"[CATALOG] Updated category={category.id}: {changes}")
        log_action(db, actor, "CATEGORY_UPDATED", "categories", category.id, changes)
    return category


def list_categories(db: Session, include_inactive: bool = True) -> list[tuple[Category, int]]:
    """Categories by name with their active item counts."""
    item_count = (
        select(StockItem.category_id, func.count(StockItem.id).label("item_count"))
        .where(StockItem.active.is_(True))
        .group_by(StockItem.category_id)
        .subquery()
    )
    query = (
        select(Category, func.coalesce(item_count.c.item_count, 0))
        .outerjoin(item_count, item_count.c.category_id == Category.id)
        .order_by(Category.name)
    )
    if not include_inactive:
        query = query.where(Category.active.is_(True))

    return [(category, count) for category, count in db.execute(query).all()]


# -----------------------------
# Items
# -----------------------------
def next_barcode(db: Session) -> str:
    """Next code in the <PREFIX>-<YEAR>-<NNNNN> sequence of the current year."""
    stem = f"{settings.barcode_prefix}-{utcnow().year}-"
    existing = db.scalars(
        select(StockItem.barcode).where(StockItem.barcode.like(f"{stem}%"))
    ).all()

    last = 0
    for code in existing:
        suffix = code[len(stem):]
        if suffix.isdigit():
            last = max(last, int(suffix))

    return f"{stem}{last + 1:05d}"


def get_item(db: Session, item_id: uuid.UUID) -> StockItem:
    item = db.scalars(
        select(StockItem)
        .where(StockItem.id == item_id)
        .options(selectinload(StockItem.category))
    ).one_or_none()
    if item is None:
        raise ResourceNotFoundError("Item", item_id)
    return item


def list_items(
    db: Session,
    search: Optional[str] = None,
    category_id: Optional[uuid.UUID] = None,
    include_inactive: bool = False,
    low_stock: bool = False
) -> list[StockItem]:
    query = select(StockItem).options(selectinload(StockItem.category)).order_by(StockItem.name)

    if not include_inactive:
        query = query.where(StockItem.active.is_(True))
    if category_id:
        query = query.where(StockItem.category_id == category_id)
    if low_stock:
        query = query.where(StockItem.quantity <= StockItem.min_quantity)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                StockItem.name.ilike(pattern),
                StockItem.barcode.ilike(pattern),
                StockItem.brand.ilike(pattern),
                StockItem.model.ilike(pattern),
                StockItem.serial_number.ilike(pattern)
            )
        )

    return list(db.scalars(query).all())


def low_stock_items(db: Session) -> list[StockItem]:
    """Active items at or below their minimum quantity."""
    return list_items(db, low_stock=True)


def create_item(db: Session, data: ItemCreate, actor=None) -> StockItem:
    payload = data.model_dump()
    if payload.get("condition") is not None:
        payload["condition"] = payload["condition"].value

    with transaction(db, "create_item"):
        if data.category_id:
            get_category(db, data.category_id)
        item = StockItem(barcode=next_barcode(db), active=True, **payload)
        db.add(item)
        db.flush()

    logger.info(f"[CATALOG] Created item={item.id} barcode={item.barcode} qty={item.quantity}")
    log_action(
        db, actor, "ITEM_CREATED", "items", item.id,
        {"name": item.name, "barcode": item.barcode, "quantity": item.quantity}
    )
    return item


def update_item(db: Session, item_id: uuid.UUID, data: ItemUpdate, actor=None) -> StockItem:
    changes = data.model_dump(exclude_unset=True)
    if changes.get("condition") is not None:
        changes["condition"] = changes["condition"].value

    with transaction(db, "update_item"):
        item = get_item(db, item_id)
        if changes.get("category_id"):
            get_category(db, changes["category_id"])
        for field, value in changes.items():
            setattr(item, field, value)

    if changes:
        logger.info(f"[CATALOG] Updated item={item.id}: {sorted(changes)}")
        log_action(
            db, actor, "ITEM_UPDATED", "items", item.id,
            {key: str(value) if value is not None else None for key, value in changes.items()}
        )
    return item


def deactivate_item(db: Session, item_id: uuid.UUID, actor=None) -> StockItem:
    """Soft delete."""
    with transaction(db, "deactivate_item"):
        item = get_item(db, item_id)
        item.active = False

    logger.info(f"[CATALOG] Deactivated item={item.id}")
    log_action(db, actor, "ITEM_DEACTIVATED", "items", item.id, {"name": item.name})
    return item
