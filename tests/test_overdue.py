from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from billing.models import BusinessOwner, Customer, Invoice
from billing.services.reports import dashboard_totals, mark_overdue, overdue_reminders

D = Decimal
TODAY = date(2026, 3, 10)


@pytest.fixture()
def tenant(db_session):
    owner = BusinessOwner(
        name="Meera", phone="9111111111", password_hash="x", business_name="Meera Stores"
    )
    db_session.add(owner)
    db_session.flush()
    customer = Customer(owner_id=owner.id, name="Walk-in", phone="9222222222")
    db_session.add(customer)
    db_session.commit()
    return owner, customer


@pytest.fixture()
def add_invoice(db_session, tenant):
    owner, customer = tenant
    counter = iter(range(1, 100))

    def _add(days_from_today, final="100", paid="0", **fields):
        final_amount, paid_amount = D(final), D(paid)
        invoice = Invoice(
            owner_id=owner.id,
            customer_id=customer.id,
            invoice_number=f"SALE-2026-{next(counter):05d}",
            invoice_date=TODAY - timedelta(days=40),
            due_date=TODAY + timedelta(days=days_from_today),
            customer_name=customer.name,
            customer_phone=customer.phone,
            final_amount=final_amount,
            paid_amount=paid_amount,
            balance_amount=final_amount - paid_amount,
            payment_status="partial" if paid_amount else "pending",
            **fields,
        )
        db_session.add(invoice)
        db_session.commit()
        return invoice

    return _add


def test_reminders_are_categorised(db_session, tenant, add_invoice):
    owner, _ = tenant
    late = add_invoice(-5)
    add_invoice(0)
    add_invoice(1)
    add_invoice(3)
    add_invoice(4)

    report = overdue_reminders(db_session, owner.id, today=TODAY)

    assert report["summary"]["total"] == 4
    assert report["summary"]["overdue"] == 1
    assert report["summary"]["due_today"] == 1
    assert report["summary"]["due_soon"] == 2
    assert report["summary"]["total_amount"] == D("400")

    first = report["invoices"][0]
    assert first["invoice_id"] == late.id
    assert (first["category"], first["urgency"], first["days_overdue"]) == (
        "overdue",
        "critical",
        5,
    )
    soon = report["categories"]["due-soon"]
    assert [(entry["urgency"], entry["days_until_due"]) for entry in soon] == [
        ("high", 1),
        ("medium", 3),
    ]
    assert report["categories"]["due-today"][0]["urgency"] == "high"


def test_settled_quotation_and_cancelled_invoices_are_skipped(
    db_session, tenant, add_invoice
):
    owner, _ = tenant
    add_invoice(-2, paid="100", payment_status="paid")
    add_invoice(-2, invoice_type="QUOTATION")
    add_invoice(-2, status="cancelled", payment_status="cancelled")
    partial = add_invoice(-2, final="250", paid="50")

    report = overdue_reminders(db_session, owner.id, today=TODAY)

    assert [entry["invoice_id"] for entry in report["invoices"]] == [partial.id]
    assert report["summary"]["total_amount"] == D("200")


def test_mark_overdue_updates_only_past_due(db_session, tenant, add_invoice):
    owner, _ = tenant
    late = add_invoice(-1)
    partial = add_invoice(-10, paid="20")
    current = add_invoice(0)
    quotation = add_invoice(-3, invoice_type="QUOTATION")

    assert mark_overdue(db_session, owner.id, today=TODAY) == 2
    assert mark_overdue(db_session, owner.id, today=TODAY) == 0

    db_session.expire_all()
    assert late.payment_status == "overdue"
    assert partial.payment_status == "overdue"
    assert current.payment_status == "pending"
    assert quotation.payment_status == "pending"

    report = overdue_reminders(db_session, owner.id, today=TODAY)
    assert report["summary"]["overdue"] == 2


def test_reminder_limit(db_session, tenant, add_invoice):
    owner, _ = tenant
    for offset in range(-6, 0):
        add_invoice(offset)

    report = overdue_reminders(db_session, owner.id, today=TODAY, limit=4)

    assert report["summary"]["total"] == 4
    assert report["invoices"][0]["days_overdue"] == 6


def test_dashboard_totals(db_session, tenant, add_invoice):
    owner, _ = tenant
    add_invoice(10, final="100")
    add_invoice(10, final="300", paid="300", payment_status="paid")
    add_invoice(-1, final="50", paid="10", payment_status="overdue")
    add_invoice(10, final="80", invoice_type="QUOTATION")
    add_invoice(10, final="40", invoice_type="PURCHASE")

    totals = dashboard_totals(db_session, owner.id)

    assert totals["sales"]["count"] == 3
    assert totals["sales"]["total_amount"] == D("450")
    assert totals["sales"]["pending_amount"] == D("140")
    assert totals["sales"]["avg_amount"] == D("150.00")
    assert totals["quotations"]["total_amount"] == D("80")
    assert totals["purchases"]["pending_amount"] == D("40")
    assert totals["overall"]["total_invoices"] == 5
    assert totals["overall"]["total_amount"] == D("570")
    assert totals["overall"]["total_pending"] == D("260")


def test_dashboard_endpoint(client, auth_headers):
    body = client.get("/dashboard/totals", headers=auth_headers).json()

    assert body["overall"]["total_invoices"] == 0
    assert D(body["sales"]["avg_amount"]) == 0


def test_overdue_scan_endpoint(client, auth_headers, customer):
    today = datetime.now(timezone.utc).date()
    response = client.post(
        "/invoices/",
        json={
            "customer_id": customer["id"],
            "invoice_date": (today - timedelta(days=20)).isoformat(),
            "due_date": (today - timedelta(days=5)).isoformat(),
            "line_items": [{"quantity": 1, "unit_price": 100, "tax_rate": 0}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text

    scan = client.post("/overdue-reminders/scan", headers=auth_headers)
    report = client.get("/overdue-reminders", headers=auth_headers).json()

    assert scan.json() == {"marked": 1}
    assert report["summary"]["overdue"] == 1
    assert report["invoices"][0]["payment_status"] == "overdue"
