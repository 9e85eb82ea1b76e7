from decimal import Decimal

from pydantic import BaseModel, Field

from .bank_account import BankAccountRead


class SettingsRead(BaseModel):
    owner_gstin: str | None
    owner_pan: str | None
    default_tax_rate: Decimal
    default_tax_type: str
    default_payment_terms: str
    sales_invoice_prefix: str | None
    purchase_invoice_prefix: str | None
    quotation_invoice_prefix: str | None
    item_code_prefix: str
    part_number_prefix: str
    auto_generate_item_codes: bool
    terms_and_conditions: str | None
    payment_instructions: str | None
    thank_you_message: str | None

    model_config = {"from_attributes": True}


class SettingsUpdate(BaseModel):
    owner_gstin: str | None = None
    owner_pan: str | None = None
    default_tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    default_tax_type: str | None = None
    default_payment_terms: str | None = None
    sales_invoice_prefix: str | None = None
    purchase_invoice_prefix: str | None = None
    quotation_invoice_prefix: str | None = None
    item_code_prefix: str | None = None
    part_number_prefix: str | None = None
    auto_generate_item_codes: bool | None = None
    terms_and_conditions: str | None = None
    payment_instructions: str | None = None
    thank_you_message: str | None = None


class InvoiceDefaults(BaseModel):
    tax_rate: Decimal
    tax_type: str
    payment_terms: str
    prefixes: dict[str, str]
    terms_and_conditions: str | None
    payment_instructions: str | None
    thank_you_message: str | None
    bank_account: BankAccountRead | None
