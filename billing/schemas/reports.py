from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class TypeTotals(BaseModel):
    count: int
    total_amount: Decimal
    pending_amount: Decimal
    avg_amount: Decimal


class OverallTotals(BaseModel):
    total_invoices: int
    total_amount: Decimal
    total_pending: Decimal


class DashboardTotals(BaseModel):
    sales: TypeTotals
    quotations: TypeTotals
    purchases: TypeTotals
    overall: OverallTotals


class OverdueEntry(BaseModel):
    invoice_id: int
    invoice_number: str
    invoice_type: str
    customer_id: int
    customer_name: str
    customer_phone: str | None
    due_date: date
    final_amount: Decimal
    balance_amount: Decimal
    payment_status: str
    category: str
    urgency: str
    days_overdue: int
    days_until_due: int


class OverdueSummary(BaseModel):
    total: int
    overdue: int
    due_today: int
    due_soon: int
    total_amount: Decimal


class OverdueReport(BaseModel):
    invoices: list[OverdueEntry]
    categories: dict[str, list[OverdueEntry]]
    summary: OverdueSummary


class OverdueScanResult(BaseModel):
    marked: int
