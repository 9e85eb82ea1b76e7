import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import AuthError, NotFoundError, ValidationError
from ..models import (
    BankAccount,
    BusinessOwner,
    BusinessSettings,
    Counter,
    Customer,
    Invoice,
    InvoiceLine,
    InvoicePayment,
    Item,
    PricingTier,
)
from ..models.base import utcnow
from ..security import ADMIN_ROLE, create_access_token, verify_password

logger = logging.getLogger(__name__)

BUSINESS_STATUSES = ("active", "suspended")


def admin_login(username: str, password: str) -> str:
    if not settings.admin_password_hash:
        raise AuthError("Admin login is not configured")
    if username != settings.admin_username or not verify_password(
        password, settings.admin_password_hash
    ):
        logger.warning("Failed admin login for %s", username)
        raise AuthError("Invalid admin credentials")
    return create_access_token(username, role=ADMIN_ROLE)


def _counts(db: Session, model, owner_ids: list[int]) -> dict[int, int]:
    if not owner_ids:
        return {}
    rows = db.execute(
        select(model.owner_id, func.count(model.id))
        .where(model.owner_id.in_(owner_ids))
        .group_by(model.owner_id)
    )
    return dict(rows.all())


def list_businesses(
    db: Session, search: str | None = None, status: str | None = None
) -> list[dict]:
    query = select(BusinessOwner).order_by(BusinessOwner.created_at.desc())
    if search:
        like = f"%{search.strip()}%"
        query = query.where(
            or_(
                BusinessOwner.business_name.ilike(like),
                BusinessOwner.name.ilike(like),
                BusinessOwner.phone.ilike(like),
                BusinessOwner.email.ilike(like),
            )
        )
    if status:
        query = query.where(BusinessOwner.status == status)
    owners = db.scalars(query).all()
    owner_ids = [owner.id for owner in owners]
    invoices = _counts(db, Invoice, owner_ids)
    customers = _counts(db, Customer, owner_ids)
    return [
        {
            "owner": owner,
            "invoice_count": invoices.get(owner.id, 0),
            "customer_count": customers.get(owner.id, 0),
        }
        for owner in owners
    ]


def get_business(db: Session, business_id: int) -> BusinessOwner:
    owner = db.get(BusinessOwner, business_id)
    if owner is None:
        raise NotFoundError("Business not found")
    return owner


def business_counts(db: Session, owner: BusinessOwner) -> dict:
    return {
        "invoice_count": _counts(db, Invoice, [owner.id]).get(owner.id, 0),
        "customer_count": _counts(db, Customer, [owner.id]).get(owner.id, 0),
    }


def _record_action(owner: BusinessOwner, action: str, admin: str, reason: str | None) -> None:
    owner.last_admin_action = {
        "action": action,
        "admin": admin,
        "timestamp": utcnow().isoformat(),
        "reason": reason,
    }


def set_status(
    db: Session, business_id: int, status: str, admin: str, reason: str | None = None
) -> BusinessOwner:
    if status not in BUSINESS_STATUSES:
        raise ValidationError("Status must be active or suspended.", field="status")
    owner = get_business(db, business_id)
    owner.status = status
    _record_action(owner, f"status:{status}", admin, reason)
    db.commit()
    db.refresh(owner)
    logger.info("Admin %s set business %s status to %s", admin, owner.id, status)
    return owner


def set_locked(
    db: Session, business_id: int, locked: bool, admin: str, reason: str | None = None
) -> BusinessOwner:
    owner = get_business(db, business_id)
    owner.is_locked = locked
    _record_action(owner, "lock" if locked else "unlock", admin, reason)
    db.commit()
    db.refresh(owner)
    logger.info("Admin %s %s business %s", admin, "locked" if locked else "unlocked", owner.id)
    return owner


def force_logout(
    db: Session, business_id: int, admin: str, reason: str | None = None
) -> BusinessOwner:
    owner = get_business(db, business_id)
    owner.tokens_valid_after = utcnow()
    _record_action(owner, "force_logout", admin, reason)
    db.commit()
    db.refresh(owner)
    logger.info("Admin %s ended all sessions of business %s", admin, owner.id)
    return owner


def delete_business(db: Session, business_id: int, admin: str) -> dict:
    owner = get_business(db, business_id)
    owner_id = owner.id
    business_name = owner.business_name
    invoice_ids = select(Invoice.id).where(Invoice.owner_id == owner_id)
    item_ids = select(Item.id).where(Item.owner_id == owner_id)
    counter_names = or_(
        Counter.name.like(f"invoice:{owner_id}:%"),
        Counter.name == f"item-code:{owner_id}",
        Counter.name == f"part-number:{owner_id}",
    )

    steps = (
        ("invoice_payments", delete(InvoicePayment).where(InvoicePayment.invoice_id.in_(invoice_ids))),
        ("invoice_lines", delete(InvoiceLine).where(InvoiceLine.invoice_id.in_(invoice_ids))),
        ("invoices", delete(Invoice).where(Invoice.owner_id == owner_id)),
        ("pricing_tiers", delete(PricingTier).where(PricingTier.item_id.in_(item_ids))),
        ("items", delete(Item).where(Item.owner_id == owner_id)),
        ("customers", delete(Customer).where(Customer.owner_id == owner_id)),
        ("bank_accounts", delete(BankAccount).where(BankAccount.owner_id == owner_id)),
        ("settings", delete(BusinessSettings).where(BusinessSettings.owner_id == owner_id)),
        ("counters", delete(Counter).where(counter_names)),
    )
    deleted = {}
    try:
        for name, statement in steps:
            result = db.execute(statement.execution_options(synchronize_session=False))
            deleted[name] = result.rowcount
        db.delete(owner)
        db.commit()
    except SQLAlchemyError:
        logger.exception("Deleting business %s failed", owner_id)
        db.rollback()
        raise
    logger.info("Admin %s deleted business %s (%s): %s", admin, owner_id, business_name, deleted)
    return {"business_id": owner_id, "business_name": business_name, "deleted": deleted}
