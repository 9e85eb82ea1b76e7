from decimal import Decimal
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import (
    BusinessOwner,
    Customer,
    Invoice,
    InvoiceStatusEnum,
    InvoiceTypeEnum,
)
from ..schemas import CustomerCreate, CustomerUpdate
from .invoice_totals import ZERO

logger = logging.getLogger(__name__)

CUSTOMER_TYPES = ("individual", "business")
REQUIRED_FIELDS = ("name", "phone", "customer_type", "payment_terms", "credit_limit")


def _check_type(value: str | None) -> None:
    if value is not None and value not in CUSTOMER_TYPES:
        raise ValidationError(
            "Customer type must be individual or business.", field="customer_type"
        )


def _phone_taken(
    db: Session, owner_id: int, phone: str, exclude_id: int | None = None
) -> bool:
    query = select(Customer.id).where(
        Customer.owner_id == owner_id, Customer.phone == phone
    )
    if exclude_id is not None:
        query = query.where(Customer.id != exclude_id)
    return db.execute(query).first() is not None


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Customer with this phone already exists", field="phone")


def create_customer(
    db: Session, owner: BusinessOwner, payload: CustomerCreate
) -> Customer:
    data = payload.model_dump()
    data["name"] = data["name"].strip()
    data["phone"] = data["phone"].strip()
    _check_type(data["customer_type"])
    if _phone_taken(db, owner.id, data["phone"]):
        raise ConflictError("Customer with this phone already exists", field="phone")
    customer = Customer(owner_id=owner.id, **data)
    db.add(customer)
    _commit(db)
    db.refresh(customer)
    return customer


def list_customers(
    db: Session,
    owner_id: int,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Customer], int]:
    query = select(Customer).where(Customer.owner_id == owner_id)
    if search:
        like = f"%{search.strip()}%"
        query = query.where(
            or_(
                Customer.name.ilike(like),
                Customer.phone.ilike(like),
                Customer.email.ilike(like),
                Customer.vendor_code.ilike(like),
            )
        )
    total = db.scalar(select(func.count()).select_from(query.subquery())) or 0
    rows = db.scalars(
        query.order_by(Customer.name).offset((page - 1) * limit).limit(limit)
    )
    return list(rows), total


def get_customer(db: Session, owner_id: int, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None or customer.owner_id != owner_id:
        raise NotFoundError("Customer not found")
    return customer


def update_customer(
    db: Session, owner: BusinessOwner, customer_id: int, payload: CustomerUpdate
) -> Customer:
    customer = get_customer(db, owner.id, customer_id)
    changes = payload.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            changes.pop(key)
    _check_type(changes.get("customer_type"))
    if "phone" in changes:
        changes["phone"] = changes["phone"].strip()
        if _phone_taken(db, owner.id, changes["phone"], exclude_id=customer.id):
            raise ConflictError("Customer with this phone already exists", field="phone")
    for key, value in changes.items():
        setattr(customer, key, value)
    _commit(db)
    db.refresh(customer)
    return customer


def delete_customer(db: Session, owner: BusinessOwner, customer_id: int) -> None:
    customer = get_customer(db, owner.id, customer_id)
    invoice_count = db.scalar(
        select(func.count(Invoice.id)).where(Invoice.customer_id == customer.id)
    )
    if invoice_count:
        raise ConflictError(
            f"Customer has {invoice_count} invoice(s) and cannot be deleted"
        )
    db.delete(customer)
    db.commit()
    logger.info("Deleted customer %s for owner %s", customer_id, owner.id)


def lookup_by_vendor_code(db: Session, owner_id: int, code: str) -> Customer:
    customer = db.scalar(
        select(Customer).where(
            Customer.owner_id == owner_id,
            func.lower(Customer.vendor_code) == code.strip().lower(),
        )
    )
    if customer is None:
        raise NotFoundError("No customer found with this vendor code")
    return customer


def financial_summary(db: Session, owner_id: int) -> list[dict]:
    customers = db.scalars(
        select(Customer).where(Customer.owner_id == owner_id).order_by(Customer.name)
    ).all()
    invoices = db.scalars(select(Invoice).where(Invoice.owner_id == owner_id)).all()

    by_customer: dict[int, list[Invoice]] = {}
    for invoice in invoices:
        by_customer.setdefault(invoice.customer_id, []).append(invoice)

    summary = []
    for customer in customers:
        rows = by_customer.get(customer.id, [])
        totals = {invoice_type.value: ZERO for invoice_type in InvoiceTypeEnum}
        outstanding = ZERO
        for invoice in rows:
            totals[invoice.invoice_type] = totals.get(
                invoice.invoice_type, ZERO
            ) + Decimal(invoice.final_amount)
            if (
                invoice.invoice_type != InvoiceTypeEnum.QUOTATION.value
                and invoice.status != InvoiceStatusEnum.CANCELLED.value
            ):
                outstanding += Decimal(invoice.balance_amount)
        summary.append(
            {
                "id": customer.id,
                "name": customer.name,
                "phone": customer.phone,
                "vendor_code": customer.vendor_code,
                "sales_amount": totals[InvoiceTypeEnum.SALES.value],
                "quotation_amount": totals[InvoiceTypeEnum.QUOTATION.value],
                "purchase_amount": totals[InvoiceTypeEnum.PURCHASE.value],
                "outstanding_balance": outstanding,
                "invoice_count": len(rows),
                "last_invoice_date": max(
                    (invoice.invoice_date for invoice in rows), default=None
                ),
            }
        )
    return summary
