from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CustomerBase(BaseModel):
    email: str | None = None
    gstin: str | None = None
    vendor_code: str | None = None
    customer_type: str = "individual"
    payment_terms: str = "immediate"
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None
    billing_street: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_pincode: str | None = None
    billing_country: str | None = "India"
    shipping_street: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_pincode: str | None = None
    shipping_country: str | None = "India"


class CustomerCreate(CustomerBase):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class CustomerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    email: str | None = None
    gstin: str | None = None
    vendor_code: str | None = None
    customer_type: str | None = None
    payment_terms: str | None = None
    credit_limit: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None
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


class CustomerRead(CustomerBase):
    id: int
    name: str
    phone: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CustomerList(BaseModel):
    customers: list[CustomerRead]
    total: int
    page: int
    limit: int


class CustomerFinancials(BaseModel):
    id: int
    name: str
    phone: str
    vendor_code: str | None
    sales_amount: Decimal
    quotation_amount: Decimal
    purchase_amount: Decimal
    outstanding_balance: Decimal
    invoice_count: int
    last_invoice_date: date | None
