import logging
import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NumberGenerationFailed
from ..models import BusinessSettings, Invoice, InvoiceTypeEnum
from ..models.base import utcnow
from .counters import next_value
from .sequence_source import SequenceSource, get_sequence_source

logger = logging.getLogger(__name__)

PREFIX_MAX_LENGTH = 15
PREFIX_INVALID_CHARS = re.compile(r"[^A-Z0-9-]")

TYPE_ABBREVIATIONS = {
    InvoiceTypeEnum.SALES.value: "SALE",
    InvoiceTypeEnum.PURCHASE.value: "PUR",
    InvoiceTypeEnum.QUOTATION.value: "QUOT",
}

PREFIX_COLUMNS = {
    InvoiceTypeEnum.SALES.value: "sales_invoice_prefix",
    InvoiceTypeEnum.PURCHASE.value: "purchase_invoice_prefix",
    InvoiceTypeEnum.QUOTATION.value: "quotation_invoice_prefix",
}


def clean_prefix(prefix: str | None) -> str | None:
    if not prefix:
        return None
    cleaned = PREFIX_INVALID_CHARS.sub("", prefix.upper()).strip("-")
    cleaned = cleaned[:PREFIX_MAX_LENGTH].strip("-")
    return cleaned or None


def default_prefix(invoice_type: str, year: int) -> str:
    abbreviation = TYPE_ABBREVIATIONS.get(invoice_type, TYPE_ABBREVIATIONS["SALES"])
    return f"{abbreviation}-{year}"


def prefix_for_type(
    business_settings: BusinessSettings | None,
    invoice_type: str,
    year: int | None = None,
) -> str:
    year = year or utcnow().year
    column = PREFIX_COLUMNS.get(invoice_type)
    if column is None:
        logger.warning("Unknown invoice type %s, using SALES prefix", invoice_type)
        column = PREFIX_COLUMNS[InvoiceTypeEnum.SALES.value]
        invoice_type = InvoiceTypeEnum.SALES.value
    configured = getattr(business_settings, column, None) if business_settings else None
    return clean_prefix(configured) or default_prefix(invoice_type, year)


def invoice_number_exists(db: Session, invoice_number: str) -> bool:
    return (
        db.execute(
            select(Invoice.id).where(Invoice.invoice_number == invoice_number)
        ).first()
        is not None
    )


def derive_invoice_number(
    db: Session,
    owner_id: int,
    invoice_type: str,
    business_settings: BusinessSettings | None = None,
    source: SequenceSource | None = None,
    max_attempts: int | None = None,
    year: int | None = None,
) -> str:
    year = year or utcnow().year
    source = source or get_sequence_source()
    max_attempts = max_attempts or settings.invoice_number_max_attempts
    prefix = prefix_for_type(business_settings, invoice_type, year)

    for attempt in range(1, max_attempts + 1):
        candidate = f"{prefix}-{source.next_suffix(db, owner_id, invoice_type, year)}"
        if not invoice_number_exists(db, candidate):
            return candidate
        logger.warning(
            "Invoice number %s already taken (attempt %s/%s)",
            candidate,
            attempt,
            max_attempts,
        )

    raise NumberGenerationFailed("Could not generate unique invoice number")


def next_item_code(db: Session, owner_id: int, prefix: str) -> str:
    return f"{prefix}-{next_value(db, f'item-code:{owner_id}'):03d}"


def next_part_number(db: Session, owner_id: int, prefix: str) -> str:
    return f"{prefix}-{next_value(db, f'part-number:{owner_id}'):03d}"
