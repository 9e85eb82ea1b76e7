import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings as app_settings
from ..errors import ValidationError
from ..models import BusinessOwner, BusinessSettings, InvoiceTypeEnum, TaxTypeEnum
from ..schemas import SettingsUpdate
from . import bank_accounts
from .numbering import clean_prefix, prefix_for_type

logger = logging.getLogger(__name__)

PAYMENT_TERMS = ("Immediate", "15 days", "30 days", "45 days", "60 days")
PREFIX_FIELDS = (
    "sales_invoice_prefix",
    "purchase_invoice_prefix",
    "quotation_invoice_prefix",
)


def get_or_create_settings(db: Session, owner: BusinessOwner) -> BusinessSettings:
    row = db.scalar(
        select(BusinessSettings).where(BusinessSettings.owner_id == owner.id)
    )
    if row is not None:
        return row
    row = BusinessSettings(
        owner_id=owner.id,
        owner_gstin=owner.gstin,
        owner_pan=owner.pan_number,
        default_tax_rate=app_settings.default_tax_rate,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Created default settings for owner %s", owner.id)
    return row


def update_settings(
    db: Session, owner: BusinessOwner, payload: SettingsUpdate
) -> BusinessSettings:
    row = get_or_create_settings(db, owner)
    changes = payload.model_dump(exclude_unset=True)

    if "default_tax_type" in changes:
        tax_type = str(changes["default_tax_type"] or "").upper()
        if tax_type not in {t.value for t in TaxTypeEnum}:
            raise ValidationError("Unknown tax type.", field="default_tax_type")
        changes["default_tax_type"] = tax_type
    if "default_payment_terms" in changes:
        if changes["default_payment_terms"] not in PAYMENT_TERMS:
            raise ValidationError(
                "Payment terms must be one of: " + ", ".join(PAYMENT_TERMS),
                field="default_payment_terms",
            )
    if changes.get("default_tax_rate", 0) is None:
        changes.pop("default_tax_rate")
    for key in PREFIX_FIELDS:
        if key in changes:
            changes[key] = clean_prefix(changes[key])
    for key in ("item_code_prefix", "part_number_prefix"):
        if key in changes:
            cleaned = clean_prefix(changes[key])
            if cleaned is None:
                raise ValidationError("Prefix cannot be empty.", field=key)
            changes[key] = cleaned[:10]
    if changes.get("auto_generate_item_codes", False) is None:
        changes.pop("auto_generate_item_codes")

    for key, value in changes.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def invoice_defaults(db: Session, owner: BusinessOwner) -> dict:
    row = get_or_create_settings(db, owner)
    return {
        "tax_rate": row.default_tax_rate,
        "tax_type": row.default_tax_type,
        "payment_terms": row.default_payment_terms,
        "prefixes": {
            invoice_type.value: prefix_for_type(row, invoice_type.value)
            for invoice_type in InvoiceTypeEnum
        },
        "terms_and_conditions": row.terms_and_conditions,
        "payment_instructions": row.payment_instructions,
        "thank_you_message": row.thank_you_message,
        "bank_account": bank_accounts.primary_account(db, owner.id),
    }
