from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import (
    BusinessOwner,
    BusinessSettings,
    Customer,
    Invoice,
    InvoiceLine,
    InvoicePayment,
    InvoiceStatusEnum,
    InvoiceTypeEnum,
    Item,
    PaymentStatusEnum,
)
from ..models.base import utcnow
from ..schemas import InvoiceCreate, InvoiceUpdate, PaymentCreate
from . import bank_accounts
from .business_settings import get_or_create_settings
from .customers import get_customer
from .invoice_totals import (
    MAX_AMOUNT,
    TYPE_ALIASES,
    ZERO,
    ComputedTotals,
    TaxConfig,
    compute_invoice_totals,
    derive_payment_status,
    resolve_invoice_type,
    round2,
    safe_number,
)
from .numbering import derive_invoice_number

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = {
    "customer_name": "name",
    "customer_phone": "phone",
    "customer_email": "email",
    "customer_gstin": "gstin",
    "customer_vendor_code": "vendor_code",
}
ADDRESS_PARTS = ("street", "city", "state", "pincode", "country")
CHARGE_FIELDS = (
    "tax_type",
    "tax_rate",
    "discount_type",
    "discount_value",
    "discount_amount",
    "transport_charges",
    "other_charges",
    "rounding_adjustment",
)
BREAKDOWN_FIELDS = ("igst", "cgst", "sgst")
SNAPSHOT_BLOCKS = ("business_info", "bank_details", "authorization", "invoice_footer")
INITIAL_STATUSES = (InvoiceStatusEnum.DRAFT.value, InvoiceStatusEnum.PENDING.value)

TRANSITIONS = {
    InvoiceStatusEnum.DRAFT.value: {
        InvoiceStatusEnum.PENDING.value,
        InvoiceStatusEnum.PAID.value,
        InvoiceStatusEnum.CANCELLED.value,
    },
    InvoiceStatusEnum.PENDING.value: {
        InvoiceStatusEnum.PAID.value,
        InvoiceStatusEnum.CANCELLED.value,
    },
    InvoiceStatusEnum.PAID.value: {InvoiceStatusEnum.PENDING.value},
    InvoiceStatusEnum.CANCELLED.value: set(),
    InvoiceStatusEnum.COMPLETED.value: set(),
}

DEFAULT_DESIGNATION = "Authorized Signatory"
DEFAULT_TERMS = "Payment is due within 30 days."
DEFAULT_PAYMENT_INSTRUCTIONS = "Please make payment to the above bank account."
DEFAULT_THANK_YOU = "Thank you for your business!"


def _present(value) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def _merge(defaults: dict, override: dict | None) -> dict:
    merged = dict(defaults)
    for key, value in (override or {}).items():
        if _present(value):
            merged[key] = value
    return merged


def _customer_snapshot(data: dict, customer: Customer) -> dict:
    """Flat customer fields: request value first, stored customer as fallback."""
    snapshot = {}
    for field, attr in CUSTOMER_FIELDS.items():
        value = data.get(field)
        snapshot[field] = value if _present(value) else getattr(customer, attr)
    for kind in ("billing", "shipping"):
        for part in ADDRESS_PARTS:
            field = f"{kind}_{part}"
            value = data.get(field)
            snapshot[field] = value if _present(value) else getattr(customer, field)
        if not snapshot[f"{kind}_country"]:
            snapshot[f"{kind}_country"] = "India"
    snapshot["same_as_shipping"] = bool(data.get("same_as_shipping"))
    if snapshot["same_as_shipping"]:
        for part in ADDRESS_PARTS:
            snapshot[f"shipping_{part}"] = snapshot[f"billing_{part}"]
    return snapshot


def _business_info(owner: BusinessOwner, business_settings: BusinessSettings) -> dict:
    return {
        "name": owner.business_name,
        "phone": owner.business_phone or owner.phone,
        "email": owner.business_email or owner.email or "",
        "address": owner.address or "",
        "gstin": business_settings.owner_gstin or owner.gstin or "",
        "pan_number": business_settings.owner_pan or owner.pan_number or "",
        "company_reg_number": owner.company_reg_number or "",
        "website": owner.website or "",
        "logo_url": owner.logo_url or "",
    }


def _authorization(owner: BusinessOwner) -> dict:
    return {
        "authorized_signatory_name": owner.name,
        "designation": DEFAULT_DESIGNATION,
        "signature_url": "",
    }


def _invoice_footer(business_settings: BusinessSettings) -> dict:
    return {
        "terms_and_conditions": business_settings.terms_and_conditions or DEFAULT_TERMS,
        "footer_notes": "",
        "payment_instructions": business_settings.payment_instructions
        or DEFAULT_PAYMENT_INSTRUCTIONS,
        "thank_you_message": business_settings.thank_you_message or DEFAULT_THANK_YOU,
    }


def _supplied_breakdown(data: dict) -> dict | None:
    supplied = {key: data.get(key) for key in BREAKDOWN_FIELDS if data.get(key) is not None}
    return supplied or None


def _discount_fields(charges: dict) -> dict:
    discount_type = str(charges.get("discount_type") or "amount").lower()
    if discount_type not in ("amount", "percentage"):
        raise ValidationError(
            "Discount type must be amount or percentage.", field="discount_type"
        )
    value = charges.get("discount_value")
    if value is None:
        value = charges.get("discount_amount")
    return {
        "discount_type": discount_type,
        "discount_value": round2(safe_number(value, ZERO, ZERO, MAX_AMOUNT)),
    }


def _check_items(db: Session, owner_id: int, raw_lines: list[dict]) -> None:
    item_ids = {line["item_id"] for line in raw_lines if line.get("item_id")}
    if not item_ids:
        return
    found = set(
        db.scalars(
            select(Item.id).where(Item.owner_id == owner_id, Item.id.in_(item_ids))
        )
    )
    for index, line in enumerate(raw_lines):
        if line.get("item_id") and line["item_id"] not in found:
            raise NotFoundError(
                f"Item {line['item_id']} not found", field=f"line_items[{index}].item_id"
            )


def _apply_totals(invoice: Invoice, totals: ComputedTotals) -> None:
    for key, value in totals.as_invoice_fields().items():
        setattr(invoice, key, value)
    invoice.lines = [InvoiceLine(**line.as_fields()) for line in totals.lines]
    invoice.computation_warnings = list(totals.warnings)
    invoice.payment_status = derive_payment_status(
        totals.paid_amount, totals.balance_amount, invoice.payment_status
    )


def _sync_paid_status(invoice: Invoice, now: datetime) -> None:
    if invoice.invoice_type == InvoiceTypeEnum.QUOTATION.value:
        return
    if invoice.payment_status == PaymentStatusEnum.PAID.value:
        if invoice.status == InvoiceStatusEnum.PENDING.value:
            invoice.status = InvoiceStatusEnum.PAID.value
            invoice.paid_date = invoice.paid_date or now


def _save(db: Session, invoice: Invoice, action: str) -> Invoice:
    try:
        db.commit()
    except SQLAlchemyError:
        logger.exception("Invoice %s failed", action)
        db.rollback()
        raise
    db.refresh(invoice)
    return invoice


def create_invoice(db: Session, owner: BusinessOwner, payload: InvoiceCreate) -> Invoice:
    data = payload.model_dump()
    customer = get_customer(db, owner.id, payload.customer_id)
    business_settings = get_or_create_settings(db, owner)
    invoice_type, tags = resolve_invoice_type(payload.invoice_type, payload.tags)

    status = (payload.status or InvoiceStatusEnum.PENDING.value).lower()
    if status not in INITIAL_STATUSES:
        raise ValidationError("New invoices must be draft or pending.", field="status")

    charges = {key: data.get(key) for key in CHARGE_FIELDS}
    tax_config = TaxConfig(
        tax_type=payload.tax_type or business_settings.default_tax_type,
        tax_rate=payload.tax_rate,
        default_tax_rate=business_settings.default_tax_rate,
    )
    raw_lines = [line.model_dump() for line in payload.line_items]
    _check_items(db, owner.id, raw_lines)
    totals = compute_invoice_totals(
        raw_lines,
        charges=charges,
        tax_config=tax_config,
        paid_amount=payload.paid_amount,
        tax_breakdown=_supplied_breakdown(data),
        strict=True,
    )

    primary = bank_accounts.primary_account(db, owner.id)
    invoice = Invoice(
        owner_id=owner.id,
        customer_id=customer.id,
        invoice_type=invoice_type,
        tags=tags,
        invoice_date=payload.invoice_date or utcnow().date(),
        due_date=payload.due_date,
        status=status,
        payment_status=PaymentStatusEnum.PENDING.value,
        business_info=_merge(_business_info(owner, business_settings), payload.business_info),
        bank_details=_merge(bank_accounts.snapshot(primary, owner), payload.bank_details),
        authorization=_merge(_authorization(owner), payload.authorization),
        invoice_footer=_merge(_invoice_footer(business_settings), payload.invoice_footer),
        notes=payload.notes,
        terms=payload.terms,
        **_customer_snapshot(data, customer),
        **_discount_fields(charges),
    )
    _apply_totals(invoice, totals)
    if status != InvoiceStatusEnum.DRAFT.value:
        _sync_paid_status(invoice, utcnow())

    invoice.invoice_number = derive_invoice_number(
        db, owner.id, invoice_type, business_settings
    )
    db.add(invoice)
    _save(db, invoice, "creation")
    logger.info(
        "Created %s invoice %s for owner %s (final %s)",
        invoice.invoice_type,
        invoice.invoice_number,
        owner.id,
        invoice.final_amount,
    )
    return invoice


def _normalize_type(invoice_type: str) -> str:
    resolved = TYPE_ALIASES.get(invoice_type.strip().upper())
    if resolved is None:
        raise ValidationError(f"Unknown invoice type: {invoice_type}", field="type")
    return resolved


def list_invoices(
    db: Session,
    owner_id: int,
    invoice_type: str | None = None,
    tag: str | None = None,
    status: str | None = None,
    payment_status: str | None = None,
    customer_id: int | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Invoice], int]:
    query = select(Invoice).where(Invoice.owner_id == owner_id)
    if invoice_type:
        query = query.where(Invoice.invoice_type == _normalize_type(invoice_type))
    if status:
        query = query.where(Invoice.status == status)
    if payment_status:
        query = query.where(Invoice.payment_status == payment_status)
    if customer_id:
        query = query.where(Invoice.customer_id == customer_id)
    query = query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
    offset = (page - 1) * limit

    if tag:
        # JSON list membership is filtered here rather than in SQL.
        wanted = tag.strip().lower()
        rows = [
            invoice
            for invoice in db.scalars(query)
            if wanted in {str(value).lower() for value in invoice.tags or []}
        ]
        return rows[offset : offset + limit], len(rows)

    total = db.scalar(select(func.count()).select_from(query.subquery())) or 0
    return list(db.scalars(query.offset(offset).limit(limit))), total


def get_invoice(db: Session, owner_id: int, invoice_id: int) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if invoice is None or invoice.owner_id != owner_id:
        raise NotFoundError("Invoice not found")
    return invoice


def customer_info_v1(invoice: Invoice) -> dict:
    """Legacy nested ``customerInfo`` shape, built from the flat snapshot."""

    def address(kind: str) -> dict:
        return {
            part: getattr(invoice, f"{kind}_{part}") or ("India" if part == "country" else "")
            for part in ADDRESS_PARTS
        }

    return {
        "version": 1,
        "name": invoice.customer_name,
        "phone": invoice.customer_phone or "",
        "email": invoice.customer_email or "",
        "gstin": invoice.customer_gstin or "",
        "vendorCode": invoice.customer_vendor_code or "",
        "address": invoice.billing_street or "",
        "billingAddress": address("billing"),
        "shippingAddress": address("shipping"),
    }


def _existing_lines(invoice: Invoice) -> list[dict]:
    return [
        {
            "item_id": line.item_id,
            "name": line.name,
            "description": line.description,
            "unit": line.unit,
            "hsn_code": line.hsn_code,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "tax_rate": line.tax_rate,
        }
        for line in invoice.lines
    ]


def update_invoice(
    db: Session, owner: BusinessOwner, invoice_id: int, payload: InvoiceUpdate
) -> Invoice:
    invoice = get_invoice(db, owner.id, invoice_id)
    changes = payload.model_dump(exclude_unset=True)
    now = utcnow()

    for field in (*CUSTOMER_FIELDS, "notes", "terms"):
        if field in changes:
            setattr(invoice, field, changes[field])
    for kind in ("billing", "shipping"):
        for part in ADDRESS_PARTS:
            field = f"{kind}_{part}"
            if field in changes:
                setattr(invoice, field, changes[field])
    if changes.get("same_as_shipping") is not None:
        invoice.same_as_shipping = changes["same_as_shipping"]
        if invoice.same_as_shipping:
            for part in ADDRESS_PARTS:
                setattr(invoice, f"shipping_{part}", getattr(invoice, f"billing_{part}"))
    for block in SNAPSHOT_BLOCKS:
        if changes.get(block):
            setattr(invoice, block, _merge(getattr(invoice, block) or {}, changes[block]))
    if not invoice.customer_name:
        raise ValidationError("Customer name cannot be empty.", field="customer_name")
    if changes.get("due_date"):
        invoice.due_date = changes["due_date"]
    if changes.get("invoice_date"):
        invoice.invoice_date = changes["invoice_date"]
    if changes.get("tags") is not None:
        _, invoice.tags = resolve_invoice_type(invoice.invoice_type, changes["tags"])

    recompute = changes.get("line_items") is not None or any(
        key in changes for key in (*CHARGE_FIELDS, *BREAKDOWN_FIELDS)
    )
    if recompute:
        charges = {
            "discount_type": invoice.discount_type,
            "discount_value": invoice.discount_value,
            "transport_charges": invoice.transport_charges,
            "other_charges": invoice.other_charges,
            "rounding_adjustment": invoice.rounding_adjustment,
        }
        if "discount_amount" in changes and "discount_value" not in changes:
            changes["discount_value"] = changes["discount_amount"]
        charges.update(
            {key: changes[key] for key in CHARGE_FIELDS if key in changes and key != "discount_amount"}
        )
        raw_lines = changes.get("line_items")
        if raw_lines is None:
            raw_lines = _existing_lines(invoice)
        else:
            _check_items(db, owner.id, raw_lines)
        tax_config = TaxConfig(
            tax_type=changes.get("tax_type") or invoice.tax_type,
            tax_rate=changes.get("tax_rate", invoice.tax_rate),
            default_tax_rate=invoice.tax_rate,
        )
        totals = compute_invoice_totals(
            raw_lines,
            charges=charges,
            tax_config=tax_config,
            paid_amount=invoice.paid_amount,
            tax_breakdown=_supplied_breakdown(changes),
        )
        for key, value in _discount_fields(charges).items():
            setattr(invoice, key, value)
        _apply_totals(invoice, totals)
        _sync_paid_status(invoice, now)

    if changes.get("status"):
        apply_status_transition(invoice, changes["status"], now)

    _save(db, invoice, "update")
    logger.info("Updated invoice %s for owner %s", invoice.invoice_number, owner.id)
    return invoice


def apply_status_transition(invoice: Invoice, new_status: str, now: datetime) -> Invoice:
    new_status = new_status.strip().lower()
    if new_status not in TRANSITIONS:
        raise ValidationError(f"Unknown status: {new_status}", field="status")
    current = invoice.status
    if new_status == current:
        return invoice
    if new_status not in TRANSITIONS.get(current, set()):
        raise ConflictError(
            f"Cannot change invoice status from {current} to {new_status}",
            field="status",
        )

    final_amount = Decimal(invoice.final_amount)
    if new_status == InvoiceStatusEnum.PAID.value:
        invoice.paid_amount = final_amount
        invoice.balance_amount = ZERO
        invoice.paid_date = now
        invoice.payment_status = PaymentStatusEnum.PAID.value
    elif new_status == InvoiceStatusEnum.CANCELLED.value:
        invoice.payment_status = PaymentStatusEnum.CANCELLED.value
    elif current == InvoiceStatusEnum.PAID.value:
        invoice.paid_amount = ZERO
        invoice.balance_amount = final_amount
        invoice.paid_date = None
        invoice.payment_status = derive_payment_status(ZERO, final_amount)
    else:
        invoice.payment_status = derive_payment_status(
            Decimal(invoice.paid_amount),
            Decimal(invoice.balance_amount),
            invoice.payment_status,
        )
    invoice.status = new_status
    return invoice


def change_status(
    db: Session, owner: BusinessOwner, invoice_id: int, new_status: str
) -> Invoice:
    invoice = get_invoice(db, owner.id, invoice_id)
    previous = invoice.status
    apply_status_transition(invoice, new_status, utcnow())
    _save(db, invoice, "status change")
    logger.info(
        "Invoice %s status %s -> %s", invoice.invoice_number, previous, invoice.status
    )
    return invoice


def record_payment(
    invoice: Invoice,
    amount,
    paid_at: datetime | None = None,
    method: str | None = None,
    reference: str | None = None,
    note: str | None = None,
) -> InvoicePayment:
    if invoice.status == InvoiceStatusEnum.CANCELLED.value:
        raise ConflictError("Payments cannot be recorded on a cancelled invoice")
    if invoice.invoice_type == InvoiceTypeEnum.QUOTATION.value:
        raise ConflictError("Payments cannot be recorded on a quotation")
    value = safe_number(amount, ZERO, ZERO, MAX_AMOUNT)
    if value <= 0:
        raise ValidationError("Payment amount must be a positive number.", field="amount")
    value = round2(value)
    paid_at = paid_at or utcnow()

    paid_amount = round2(Decimal(invoice.paid_amount) + value)
    if paid_amount > MAX_AMOUNT:
        raise ValidationError("Payment exceeds the supported amount.", field="amount")
    invoice.paid_amount = paid_amount
    invoice.balance_amount = round2(Decimal(invoice.final_amount) - paid_amount)
    invoice.payment_status = derive_payment_status(
        invoice.paid_amount, invoice.balance_amount, invoice.payment_status
    )
    if invoice.balance_amount <= 0 and invoice.status != InvoiceStatusEnum.PAID.value:
        invoice.status = InvoiceStatusEnum.PAID.value
        invoice.paid_date = paid_at

    payment = InvoicePayment(
        amount=value, paid_at=paid_at, method=method, reference=reference, note=note
    )
    invoice.payments.append(payment)
    return payment


def add_payment(
    db: Session, owner: BusinessOwner, invoice_id: int, payload: PaymentCreate
) -> Invoice:
    invoice = get_invoice(db, owner.id, invoice_id)
    record_payment(
        invoice,
        payload.amount,
        paid_at=payload.paid_at,
        method=payload.method,
        reference=payload.reference,
        note=payload.note,
    )
    _save(db, invoice, "payment")
    logger.info(
        "Recorded payment on invoice %s, balance %s",
        invoice.invoice_number,
        invoice.balance_amount,
    )
    return invoice


def list_payments(db: Session, owner_id: int, invoice_id: int) -> list[InvoicePayment]:
    return list(get_invoice(db, owner_id, invoice_id).payments)


def delete_invoice(db: Session, owner: BusinessOwner, invoice_id: int) -> None:
    invoice = get_invoice(db, owner.id, invoice_id)
    number = invoice.invoice_number
    db.delete(invoice)
    try:
        db.commit()
    except SQLAlchemyError:
        logger.exception("Invoice deletion failed")
        db.rollback()
        raise
    logger.info("Deleted invoice %s for owner %s", number, owner.id)
