from .bank_account import BankAccount
from .base import Base
from .business_owner import BusinessOwner
from .business_settings import BusinessSettings
from .counter import Counter
from .customer import Customer
from .invoice import (
    Invoice,
    InvoiceStatusEnum,
    InvoiceTypeEnum,
    PaymentStatusEnum,
    TaxTypeEnum,
)
from .invoice_line import InvoiceLine
from .invoice_payment import InvoicePayment
from .item import Item, PricingTier

__all__ = [
    "Base",
    "BankAccount",
    "BusinessOwner",
    "BusinessSettings",
    "Counter",
    "Customer",
    "Invoice",
    "InvoiceLine",
    "InvoicePayment",
    "InvoiceStatusEnum",
    "InvoiceTypeEnum",
    "Item",
    "PaymentStatusEnum",
    "PricingTier",
    "TaxTypeEnum",
]
