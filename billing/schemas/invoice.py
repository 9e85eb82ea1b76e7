from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# Numeric request fields stay loose; the totals engine owns coercion.
LooseNumber = int | float | str | None


class LineItemIn(BaseModel):
    item_id: int | None = None
    name: str | None = None
    description: str | None = None
    unit: str | None = None
    hsn_code: str | None = None
    quantity: LooseNumber = None
    unit_price: LooseNumber = None
    tax_rate: LooseNumber = None


class InvoiceSnapshotFields(BaseModel):
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    customer_gstin: str | None = None
    customer_vendor_code: str | None = None
    billing_street: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_pincode: str | None = None
    billing_country: str | None = None
    shipping_street: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_pincode: str | None = None
    shipping_country: str | None = None
    same_as_shipping: bool | None = None
    business_info: dict | None = None
    bank_details: dict | None = None
    authorization: dict | None = None
    invoice_footer: dict | None = None


class InvoiceChargeFields(BaseModel):
    tax_type: str | None = None
    tax_rate: LooseNumber = None
    discount_type: str | None = None
    discount_value: LooseNumber = None
    discount_amount: LooseNumber = None
    transport_charges: LooseNumber = None
    other_charges: LooseNumber = None
    rounding_adjustment: LooseNumber = None
    igst: LooseNumber = None
    cgst: LooseNumber = None
    sgst: LooseNumber = None


class InvoiceCreate(InvoiceSnapshotFields, InvoiceChargeFields):
    customer_id: int
    line_items: list[LineItemIn]
    due_date: date
    invoice_date: date | None = None
    invoice_type: str | None = None
    tags: list[str] | None = None
    status: str | None = None
    paid_amount: LooseNumber = None
    notes: str | None = None
    terms: str | None = None


class InvoiceUpdate(InvoiceSnapshotFields, InvoiceChargeFields):
    line_items: list[LineItemIn] | None = None
    due_date: date | None = None
    invoice_date: date | None = None
    tags: list[str] | None = None
    status: str | None = None
    notes: str | None = None
    terms: str | None = None


class InvoiceLineRead(BaseModel):
    id: int
    position: int
    item_id: int | None
    name: str
    description: str
    unit: str
    hsn_code: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    line_total: Decimal
    tax_amount: Decimal
    total_amount: Decimal

    model_config = {"from_attributes": True}


class InvoiceRead(BaseModel):
    id: int
    customer_id: int
    invoice_number: str
    invoice_type: str
    tags: list[str]
    invoice_date: date
    due_date: date
    sent_date: datetime | None
    viewed_date: datetime | None
    paid_date: datetime | None
    status: str
    payment_status: str

    customer_name: str
    customer_phone: str | None
    customer_email: str | None
    customer_gstin: str | None
    customer_vendor_code: str | None
    billing_street: str | None
    billing_city: str | None
    billing_state: str | None
    billing_pincode: str | None
    billing_country: str | None
    shipping_street: str | None
    shipping_city: str | None
    shipping_state: str | None
    shipping_pincode: str | None
    shipping_country: str | None
    same_as_shipping: bool

    business_info: dict
    bank_details: dict
    authorization: dict
    invoice_footer: dict

    tax_type: str
    tax_rate: Decimal
    igst: Decimal
    cgst: Decimal
    sgst: Decimal
    subtotal: Decimal
    total_tax_amount: Decimal
    discount_type: str
    discount_value: Decimal
    discount_amount: Decimal
    transport_charges: Decimal
    other_charges: Decimal
    rounding_adjustment: Decimal
    final_amount: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    computation_warnings: list[str]

    notes: str | None
    terms: str | None
    created_at: datetime
    updated_at: datetime
    lines: list[InvoiceLineRead]
    customer_info: dict | None = None

    model_config = {"from_attributes": True}


class InvoiceList(BaseModel):
    invoices: list[InvoiceRead]
    total: int
    page: int
    limit: int


class StatusUpdate(BaseModel):
    status: str = Field(min_length=1)


class PaymentCreate(BaseModel):
    amount: LooseNumber = None
    paid_at: datetime | None = None
    method: str | None = None
    reference: str | None = None
    note: str | None = None


class PaymentRead(BaseModel):
    id: int
    invoice_id: int
    amount: Decimal
    paid_at: datetime
    method: str | None
    reference: str | None
    note: str | None

    model_config = {"from_attributes": True}
