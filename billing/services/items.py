from decimal import Decimal
import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import BusinessOwner, InvoiceLine, Item, PricingTier
from ..models.base import utcnow
from ..schemas import ItemCreate, ItemUpdate, PricingTierIn
from .business_settings import get_or_create_settings
from .invoice_totals import MAX_QUANTITY, ZERO, line_amounts, safe_number
from .numbering import next_item_code, next_part_number

logger = logging.getLogger(__name__)

ITEM_STATUSES = ("active", "inactive")
STANDARD_TIER = "Standard Price"


def _clean_code(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().upper()
    return value or None


def _code_taken(
    db: Session, owner_id: int, column, value: str, exclude_id: int | None = None
) -> bool:
    query = select(Item.id).where(Item.owner_id == owner_id, column == value)
    if exclude_id is not None:
        query = query.where(Item.id != exclude_id)
    return db.execute(query).first() is not None


def _check_codes(db: Session, owner_id: int, data: dict, exclude_id: int | None = None) -> None:
    if data.get("item_code") and _code_taken(
        db, owner_id, Item.item_code, data["item_code"], exclude_id
    ):
        raise ConflictError("Item code already exists", field="item_code")
    if data.get("part_number") and _code_taken(
        db, owner_id, Item.part_number, data["part_number"], exclude_id
    ):
        raise ConflictError("Part number already exists", field="part_number")


def _check_status(value: str | None) -> None:
    if value is not None and value not in ITEM_STATUSES:
        raise ValidationError("Status must be active or inactive.", field="status")


def _build_tiers(tiers: list[PricingTierIn]) -> list[PricingTier]:
    rows = []
    for index, tier in enumerate(tiers):
        if tier.max_quantity is not None and tier.max_quantity < tier.min_quantity:
            raise ValidationError(
                "Tier maximum quantity is below its minimum.",
                field=f"pricing_tiers[{index}].max_quantity",
            )
        rows.append(
            PricingTier(
                min_quantity=tier.min_quantity,
                max_quantity=tier.max_quantity,
                unit_price=tier.unit_price,
                description=tier.description,
            )
        )
    return rows


def _ensure_standard_tier(item: Item) -> None:
    if not item.pricing_tiers and item.selling_price and item.selling_price > 0:
        item.pricing_tiers.append(
            PricingTier(
                min_quantity=Decimal("1"),
                unit_price=item.selling_price,
                description=STANDARD_TIER,
            )
        )


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Item code or part number already exists")


def create_item(db: Session, owner: BusinessOwner, payload: ItemCreate) -> Item:
    data = payload.model_dump(exclude={"pricing_tiers"})
    data["name"] = data["name"].strip()
    data["item_code"] = _clean_code(data["item_code"])
    data["part_number"] = _clean_code(data["part_number"])
    _check_status(data["status"])
    _check_codes(db, owner.id, data)

    business_settings = get_or_create_settings(db, owner)
    if business_settings.auto_generate_item_codes:
        if not data["item_code"]:
            data["item_code"] = next_item_code(
                db, owner.id, business_settings.item_code_prefix
            )
        if not data["part_number"]:
            data["part_number"] = next_part_number(
                db, owner.id, business_settings.part_number_prefix
            )

    item = Item(owner_id=owner.id, **data)
    item.pricing_tiers = _build_tiers(payload.pricing_tiers or [])
    _ensure_standard_tier(item)
    db.add(item)
    _commit(db)
    db.refresh(item)
    logger.info("Created item %s (%s) for owner %s", item.id, item.item_code, owner.id)
    return item


def list_items(
    db: Session,
    owner_id: int,
    search: str | None = None,
    status: str | None = None,
    category: str | None = None,
) -> list[Item]:
    query = select(Item).where(Item.owner_id == owner_id)
    if search:
        like = f"%{search.strip()}%"
        query = query.where(
            or_(
                Item.name.ilike(like),
                Item.item_code.ilike(like),
                Item.part_number.ilike(like),
                Item.description.ilike(like),
            )
        )
    if status:
        query = query.where(Item.status == status)
    if category:
        query = query.where(Item.category == category)
    return list(db.scalars(query.order_by(Item.id.desc())))


def get_item(db: Session, owner_id: int, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if item is None or item.owner_id != owner_id:
        raise NotFoundError("Item not found")
    return item


def update_item(
    db: Session, owner: BusinessOwner, item_id: int, payload: ItemUpdate
) -> Item:
    item = get_item(db, owner.id, item_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"pricing_tiers"})
    for key in ("name", "unit", "selling_price", "tax_rate", "stock_quantity", "status"):
        if key in changes and changes[key] is None:
            changes.pop(key)
    for key in ("item_code", "part_number"):
        if key in changes:
            changes[key] = _clean_code(changes[key])
    _check_status(changes.get("status"))
    _check_codes(db, owner.id, changes, exclude_id=item.id)

    for key, value in changes.items():
        setattr(item, key, value)
    if payload.pricing_tiers is not None:
        item.pricing_tiers = _build_tiers(payload.pricing_tiers)
    elif "selling_price" in changes:
        standard = [
            tier for tier in item.pricing_tiers if tier.description == STANDARD_TIER
        ]
        if len(standard) == len(item.pricing_tiers) == 1:
            standard[0].unit_price = item.selling_price
    _ensure_standard_tier(item)
    _commit(db)
    db.refresh(item)
    return item


def delete_item(db: Session, owner: BusinessOwner, item_id: int) -> None:
    item = get_item(db, owner.id, item_id)
    db.execute(
        update(InvoiceLine).where(InvoiceLine.item_id == item.id).values(item_id=None)
    )
    db.delete(item)
    db.commit()
    logger.info("Deleted item %s for owner %s", item_id, owner.id)


def lookup_item(db: Session, owner_id: int, code: str) -> Item:
    code = code.strip().upper()
    item = db.scalar(
        select(Item).where(
            Item.owner_id == owner_id,
            or_(func.upper(Item.item_code) == code, func.upper(Item.part_number) == code),
        )
    )
    if item is None:
        raise NotFoundError("Item not found", field="code")
    item.times_used = (item.times_used or 0) + 1
    item.last_used_at = utcnow()
    db.commit()
    db.refresh(item)
    return item


def applicable_tier(item: Item, quantity: Decimal) -> PricingTier | None:
    matches = [
        tier
        for tier in item.pricing_tiers
        if tier.min_quantity <= quantity
        and (tier.max_quantity is None or quantity <= tier.max_quantity)
    ]
    return max(matches, key=lambda tier: tier.min_quantity, default=None)


def price_for_quantity(item: Item, quantity) -> dict:
    quantity = safe_number(quantity, Decimal("1"), ZERO, MAX_QUANTITY)
    tier = applicable_tier(item, quantity)
    unit_price = Decimal(tier.unit_price if tier else item.selling_price)
    tax_rate = Decimal(item.tax_rate)
    line_total, tax_amount, total_amount = line_amounts(quantity, unit_price, tax_rate)
    return {
        "item_id": item.id,
        "quantity": quantity,
        "unit_price": unit_price,
        "tier": tier.description if tier else None,
        "tax_rate": tax_rate,
        "line_total": line_total,
        "tax_amount": tax_amount,
        "total_amount": total_amount,
    }
