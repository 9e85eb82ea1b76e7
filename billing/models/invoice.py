from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class InvoiceTypeEnum(str, Enum):
    SALES = "SALES"
    PURCHASE = "PURCHASE"
    QUOTATION = "QUOTATION"


class InvoiceStatusEnum(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatusEnum(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class TaxTypeEnum(str, Enum):
    IGST = "IGST"
    CGST_SGST = "CGST_SGST"


def _money_column(**kwargs):
    return mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"), **kwargs)


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_owner_customer", "owner_id", "customer_id"),
        Index("ix_invoices_owner_invoice_date", "owner_id", "invoice_date"),
        Index("ix_invoices_owner_type", "owner_id", "invoice_type"),
        Index("ix_invoices_owner_due_date", "owner_id", "due_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("business_owners.id"), nullable=False
    )
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    invoice_number: Mapped[str] = mapped_column(String(60), unique=True, nullable=False)
    invoice_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceTypeEnum.SALES.value
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    sent_date: Mapped[datetime | None] = mapped_column(DateTime)
    viewed_date: Mapped[datetime | None] = mapped_column(DateTime)
    paid_date: Mapped[datetime | None] = mapped_column(DateTime)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatusEnum.PENDING.value
    )
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatusEnum.PENDING.value
    )

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(50))
    customer_email: Mapped[str | None] = mapped_column(String(255))
    customer_gstin: Mapped[str | None] = mapped_column(String(15))
    customer_vendor_code: Mapped[str | None] = mapped_column(String(50))
    billing_street: Mapped[str | None] = mapped_column(String(255))
    billing_city: Mapped[str | None] = mapped_column(String(100))
    billing_state: Mapped[str | None] = mapped_column(String(100))
    billing_pincode: Mapped[str | None] = mapped_column(String(20))
    billing_country: Mapped[str | None] = mapped_column(String(100))
    shipping_street: Mapped[str | None] = mapped_column(String(255))
    shipping_city: Mapped[str | None] = mapped_column(String(100))
    shipping_state: Mapped[str | None] = mapped_column(String(100))
    shipping_pincode: Mapped[str | None] = mapped_column(String(20))
    shipping_country: Mapped[str | None] = mapped_column(String(100))
    same_as_shipping: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    business_info: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    bank_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    authorization: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    invoice_footer: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    tax_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaxTypeEnum.IGST.value
    )
    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("18")
    )
    igst: Mapped[Decimal] = _money_column()
    cgst: Mapped[Decimal] = _money_column()
    sgst: Mapped[Decimal] = _money_column()
    subtotal: Mapped[Decimal] = _money_column()
    total_tax_amount: Mapped[Decimal] = _money_column()
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False, default="amount")
    discount_value: Mapped[Decimal] = _money_column()
    discount_amount: Mapped[Decimal] = _money_column()
    transport_charges: Mapped[Decimal] = _money_column()
    other_charges: Mapped[Decimal] = _money_column()
    rounding_adjustment: Mapped[Decimal] = _money_column()
    final_amount: Mapped[Decimal] = _money_column()
    paid_amount: Mapped[Decimal] = _money_column()
    balance_amount: Mapped[Decimal] = _money_column()
    computation_warnings: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )

    notes: Mapped[str | None] = mapped_column(Text)
    terms: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    lines: Mapped[list["InvoiceLine"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLine.position",
    )
    payments: Mapped[list["InvoicePayment"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePayment.paid_at",
    )
