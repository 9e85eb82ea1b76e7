from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class BusinessSettings(Base):
    __tablename__ = "business_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("business_owners.id"), unique=True, nullable=False
    )
    owner_gstin: Mapped[str | None] = mapped_column(String(15))
    owner_pan: Mapped[str | None] = mapped_column(String(10))
    default_tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("18")
    )
    default_tax_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="IGST"
    )
    default_payment_terms: Mapped[str] = mapped_column(
        String(20), nullable=False, default="30 days"
    )
    sales_invoice_prefix: Mapped[str | None] = mapped_column(String(15))
    purchase_invoice_prefix: Mapped[str | None] = mapped_column(String(15))
    quotation_invoice_prefix: Mapped[str | None] = mapped_column(String(15))
    item_code_prefix: Mapped[str] = mapped_column(String(10), nullable=False, default="ITM")
    part_number_prefix: Mapped[str] = mapped_column(String(10), nullable=False, default="PN")
    auto_generate_item_codes: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    terms_and_conditions: Mapped[str | None] = mapped_column(Text)
    payment_instructions: Mapped[str | None] = mapped_column(Text)
    thank_you_message: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )
