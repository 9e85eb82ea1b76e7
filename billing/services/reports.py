from datetime import date, timedelta
from decimal import Decimal
import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Invoice, InvoiceStatusEnum, InvoiceTypeEnum, PaymentStatusEnum
from ..models.base import utcnow
from .invoice_totals import ZERO, round2

logger = logging.getLogger(__name__)

UNPAID_STATUSES = (
    PaymentStatusEnum.PENDING.value,
    PaymentStatusEnum.PARTIAL.value,
    PaymentStatusEnum.OVERDUE.value,
)
DASHBOARD_GROUPS = {
    "sales": InvoiceTypeEnum.SALES.value,
    "quotations": InvoiceTypeEnum.QUOTATION.value,
    "purchases": InvoiceTypeEnum.PURCHASE.value,
}


def dashboard_totals(db: Session, owner_id: int) -> dict:
    invoices = db.scalars(select(Invoice).where(Invoice.owner_id == owner_id)).all()
    totals = {}
    for key, invoice_type in DASHBOARD_GROUPS.items():
        rows = [invoice for invoice in invoices if invoice.invoice_type == invoice_type]
        total_amount = sum((Decimal(invoice.final_amount) for invoice in rows), ZERO)
        pending_amount = sum(
            (
                Decimal(invoice.balance_amount)
                for invoice in rows
                if invoice.payment_status in UNPAID_STATUSES
            ),
            ZERO,
        )
        totals[key] = {
            "count": len(rows),
            "total_amount": total_amount,
            "pending_amount": pending_amount,
            "avg_amount": round2(total_amount / len(rows)) if rows else ZERO,
        }
    totals["overall"] = {
        "total_invoices": len(invoices),
        "total_amount": sum(
            (totals[key]["total_amount"] for key in DASHBOARD_GROUPS), ZERO
        ),
        "total_pending": sum(
            (totals[key]["pending_amount"] for key in DASHBOARD_GROUPS), ZERO
        ),
    }
    return totals


def _classify(due_date: date, today: date) -> tuple[str, str, int, int]:
    days = (due_date - today).days
    if days < 0:
        return "overdue", "critical", -days, 0
    if days == 0:
        return "due-today", "high", 0, 0
    return "due-soon", "high" if days == 1 else "medium", 0, days


def _outstanding_query(owner_id: int):
    return select(Invoice).where(
        Invoice.owner_id == owner_id,
        Invoice.invoice_type != InvoiceTypeEnum.QUOTATION.value,
        Invoice.status != InvoiceStatusEnum.CANCELLED.value,
        Invoice.payment_status.in_(UNPAID_STATUSES),
        Invoice.balance_amount > 0,
    )


def overdue_reminders(
    db: Session, owner_id: int, today: date | None = None, limit: int = 20
) -> dict:
    today = today or utcnow().date()
    horizon = today + timedelta(days=settings.overdue_warning_days)
    invoices = db.scalars(
        _outstanding_query(owner_id)
        .where(Invoice.due_date <= horizon)
        .order_by(Invoice.due_date, Invoice.id)
        .limit(limit)
    ).all()

    entries = []
    for invoice in invoices:
        category, urgency, days_overdue, days_until_due = _classify(
            invoice.due_date, today
        )
        entries.append(
            {
                "invoice_id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "invoice_type": invoice.invoice_type,
                "customer_id": invoice.customer_id,
                "customer_name": invoice.customer_name,
                "customer_phone": invoice.customer_phone,
                "due_date": invoice.due_date,
                "final_amount": invoice.final_amount,
                "balance_amount": invoice.balance_amount,
                "payment_status": invoice.payment_status,
                "category": category,
                "urgency": urgency,
                "days_overdue": days_overdue,
                "days_until_due": days_until_due,
            }
        )

    categories = {
        name: [entry for entry in entries if entry["category"] == name]
        for name in ("overdue", "due-today", "due-soon")
    }
    return {
        "invoices": entries,
        "categories": categories,
        "summary": {
            "total": len(entries),
            "overdue": len(categories["overdue"]),
            "due_today": len(categories["due-today"]),
            "due_soon": len(categories["due-soon"]),
            "total_amount": sum(
                (Decimal(entry["balance_amount"]) for entry in entries), ZERO
            ),
        },
    }


def mark_overdue(db: Session, owner_id: int, today: date | None = None) -> int:
    today = today or utcnow().date()
    result = db.execute(
        update(Invoice)
        .where(
            Invoice.owner_id == owner_id,
            Invoice.invoice_type != InvoiceTypeEnum.QUOTATION.value,
            Invoice.status != InvoiceStatusEnum.CANCELLED.value,
            Invoice.payment_status.in_(
                (PaymentStatusEnum.PENDING.value, PaymentStatusEnum.PARTIAL.value)
            ),
            Invoice.balance_amount > 0,
            Invoice.due_date < today,
        )
        .values(payment_status=PaymentStatusEnum.OVERDUE.value, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount:
        logger.info("Marked %s invoice(s) overdue for owner %s", result.rowcount, owner_id)
    return result.rowcount
