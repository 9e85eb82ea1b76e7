from .admin import (
    AdminActionRequest,
    AdminLoginRequest,
    AdminToken,
    BusinessDeleteResult,
    BusinessStatusChange,
    BusinessSummary,
)
from .auth import LoginRequest, OwnerRead, RegisterRequest, TokenResponse
from .bank_account import (
    BankAccountCreate,
    BankAccountRead,
    BankAccountUpdate,
    BankValidationRequest,
    BankValidationResult,
)
from .customer import (
    CustomerCreate,
    CustomerFinancials,
    CustomerList,
    CustomerRead,
    CustomerUpdate,
)
from .invoice import (
    InvoiceCreate,
    InvoiceLineRead,
    InvoiceList,
    InvoiceRead,
    InvoiceUpdate,
    LineItemIn,
    PaymentCreate,
    PaymentRead,
    StatusUpdate,
)
from .item import ItemCreate, ItemPricing, ItemRead, ItemUpdate, PricingTierIn, PricingTierRead
from .reports import (
    DashboardTotals,
    OverdueEntry,
    OverdueReport,
    OverdueScanResult,
    OverdueSummary,
    TypeTotals,
)
from .settings import InvoiceDefaults, SettingsRead, SettingsUpdate
