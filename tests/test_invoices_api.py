from datetime import datetime, timedelta, timezone
from decimal import Decimal
import re

import pytest

D = Decimal


def _due(days=30):
    return (datetime.now(timezone.utc).date() + timedelta(days=days)).isoformat()


@pytest.fixture()
def create_invoice(client, auth_headers, customer):
    def _create(line_items=None, expected=201, headers=None, **fields):
        payload = {
            "customer_id": customer["id"],
            "due_date": _due(),
            "line_items": line_items
            or [{"name": "Steel rod", "quantity": 3, "unit_price": 100, "tax_rate": 18}],
            **fields,
        }
        response = client.post(
            "/invoices/", json=payload, headers=headers or auth_headers
        )
        assert response.status_code == expected, response.text
        return response.json()

    return _create


def test_create_invoice_computes_totals(create_invoice):
    invoice = create_invoice(tax_type="IGST")

    line = invoice["lines"][0]
    assert (D(line["line_total"]), D(line["tax_amount"]), D(line["total_amount"])) == (
        D("300"),
        D("54"),
        D("354"),
    )
    assert D(invoice["subtotal"]) == D("300")
    assert D(invoice["total_tax_amount"]) == D("54")
    assert D(invoice["igst"]) == D("54")
    assert D(invoice["cgst"]) == D(invoice["sgst"]) == 0
    assert D(invoice["final_amount"]) == D("354")
    assert D(invoice["balance_amount"]) == D("354")
    assert invoice["status"] == "pending"
    assert invoice["payment_status"] == "pending"
    assert invoice["invoice_type"] == "SALES"
    assert invoice["tags"] == ["SALES"]
    assert re.fullmatch(r"SALE-\d{4}-00001", invoice["invoice_number"])


def test_cgst_sgst_invoice_splits_tax(create_invoice):
    invoice = create_invoice(tax_type="CGST_SGST")

    assert D(invoice["cgst"]) == D(invoice["sgst"]) == D("27")
    assert D(invoice["igst"]) == 0
    assert D(invoice["final_amount"]) == D("354")


def test_consecutive_invoices_get_consecutive_numbers(create_invoice):
    first = create_invoice()
    second = create_invoice()

    first_seq = int(first["invoice_number"].rsplit("-", 1)[1])
    second_seq = int(second["invoice_number"].rsplit("-", 1)[1])
    assert second_seq == first_seq + 1


def test_configured_prefix_is_used(client, auth_headers, create_invoice):
    response = client.put(
        "/settings/", json={"sales_invoice_prefix": "acme/inv"}, headers=auth_headers
    )
    assert response.status_code == 200, response.text

    invoice = create_invoice()

    assert invoice["invoice_number"] == "ACMEINV-00001"


def test_snapshot_falls_back_to_customer_record(create_invoice):
    invoice = create_invoice()

    assert invoice["customer_name"] == "Globex Retail"
    assert invoice["customer_phone"] == "9811111111"
    assert invoice["customer_vendor_code"] == "VND-77"
    assert invoice["billing_city"] == "Pune"
    assert invoice["shipping_city"] == "Nashik"
    assert invoice["billing_country"] == "India"
    assert invoice["business_info"]["name"] == "Acme Traders"
    assert invoice["business_info"]["gstin"] == "29ABCDE1234F1Z5"
    assert invoice["authorization"]["authorized_signatory_name"] == "Asha Rao"
    assert invoice["authorization"]["designation"] == "Authorized Signatory"
    assert invoice["invoice_footer"]["thank_you_message"]


def test_request_snapshot_values_win(create_invoice):
    invoice = create_invoice(
        customer_name="Counter Sale",
        billing_city="Mumbai",
        same_as_shipping=True,
        authorization={"designation": "Partner", "signature_url": ""},
    )

    assert invoice["customer_name"] == "Counter Sale"
    assert invoice["customer_phone"] == "9811111111"
    assert invoice["billing_city"] == invoice["shipping_city"] == "Mumbai"
    assert invoice["authorization"]["designation"] == "Partner"
    assert invoice["authorization"]["authorized_signatory_name"] == "Asha Rao"


def test_snapshot_survives_customer_edit(client, auth_headers, customer, create_invoice):
    invoice = create_invoice()

    response = client.put(
        f"/customers/{customer['id']}",
        json={"name": "Globex Renamed", "billing_city": "Satara"},
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text

    stored = client.get(f"/invoices/{invoice['id']}", headers=auth_headers).json()
    assert stored["customer_name"] == "Globex Retail"
    assert stored["billing_city"] == "Pune"


def test_primary_bank_account_is_snapshotted(client, auth_headers, create_invoice):
    response = client.post(
        "/bank-accounts/",
        json={
            "account_holder_name": "Acme Traders",
            "bank_name": "State Bank",
            "account_number": "123456789012",
            "ifsc_code": "SBIN0001234",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text

    invoice = create_invoice()

    assert invoice["bank_details"]["bank_name"] == "State Bank"
    assert invoice["bank_details"]["ifsc_code"] == "SBIN0001234"


def test_missing_quantity_is_rejected_with_field(create_invoice):
    body = create_invoice(
        line_items=[{"name": "Bolt", "unit_price": 10}], expected=400
    )

    assert body["field"] == "line_items[0].quantity"
    assert "error" in body


def test_empty_quantity_defaults_to_one(create_invoice):
    invoice = create_invoice(line_items=[{"quantity": "", "unit_price": 50, "tax_rate": 0}])

    assert D(invoice["lines"][0]["quantity"]) == 1
    assert D(invoice["lines"][0]["line_total"]) == D("50")
    assert invoice["lines"][0]["name"] == "Item 1"


def test_missing_due_date_is_rejected(client, auth_headers, customer):
    response = client.post(
        "/invoices/",
        json={"customer_id": customer["id"], "line_items": [{"quantity": 1}]},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["field"] == "due_date"


def test_empty_line_items_are_rejected(create_invoice):
    body = create_invoice(line_items=[], expected=400)

    assert body["field"] == "line_items"


def test_new_invoice_cannot_start_paid(create_invoice):
    body = create_invoice(status="paid", expected=400)

    assert body["field"] == "status"


def test_draft_invoice_can_be_created(create_invoice):
    invoice = create_invoice(status="draft")

    assert invoice["status"] == "draft"


def test_unknown_customer_is_not_found(client, auth_headers):
    response = client.post(
        "/invoices/",
        json={
            "customer_id": 999,
            "due_date": _due(),
            "line_items": [{"quantity": 1, "unit_price": 1}],
        },
        headers=auth_headers,
    )

    assert response.status_code == 404


def test_unknown_item_reference_is_not_found(create_invoice):
    body = create_invoice(
        line_items=[{"item_id": 4242, "quantity": 1, "unit_price": 5}], expected=404
    )

    assert body["field"] == "line_items[0].item_id"


def test_unrepresentable_total_is_reported(create_invoice):
    invoice = create_invoice(
        line_items=[{"quantity": 1, "unit_price": "5000000000", "tax_rate": 0}],
        transport_charges="9000000000",
    )

    assert D(invoice["final_amount"]) == D("5000000000")
    assert invoice["computation_warnings"] == ["final_amount"]


def test_invoice_type_and_tag_filters(client, auth_headers, create_invoice):
    create_invoice()
    create_invoice(invoice_type="PURCHASE")
    quotation = create_invoice(tags=["quote", "follow-up"])

    assert quotation["invoice_type"] == "QUOTATION"
    assert quotation["invoice_number"].startswith("QUOT-")

    response = client.get("/invoices/?type=quotation", headers=auth_headers)
    assert response.json()["total"] == 1

    response = client.get("/invoices/?type=purchase", headers=auth_headers)
    assert response.json()["invoices"][0]["invoice_number"].startswith("PUR-")

    response = client.get("/invoices/?tag=Follow-Up", headers=auth_headers)
    assert [row["id"] for row in response.json()["invoices"]] == [quotation["id"]]

    response = client.get("/invoices/", headers=auth_headers)
    assert response.json()["total"] == 3
    assert response.json()["invoices"][0]["id"] == quotation["id"]

    response = client.get("/invoices/?type=receipt", headers=auth_headers)
    assert response.status_code == 400


def test_list_pagination(client, auth_headers, create_invoice):
    for _ in range(3):
        create_invoice()

    body = client.get("/invoices/?page=2&limit=2", headers=auth_headers).json()

    assert body["total"] == 3
    assert len(body["invoices"]) == 1


def test_legacy_customer_info_view(client, auth_headers, create_invoice):
    invoice = create_invoice()

    plain = client.get(f"/invoices/{invoice['id']}", headers=auth_headers).json()
    legacy = client.get(
        f"/invoices/{invoice['id']}?legacy=true", headers=auth_headers
    ).json()

    assert plain["customer_info"] is None
    info = legacy["customer_info"]
    assert info["version"] == 1
    assert info["name"] == "Globex Retail"
    assert info["vendorCode"] == "VND-77"
    assert info["billingAddress"]["city"] == "Pune"
    assert info["shippingAddress"]["pincode"] == "422010"
    assert info["address"] == "12 MG Road"


def test_other_tenant_cannot_see_invoice(client, make_owner, create_invoice):
    invoice = create_invoice()
    other = make_owner(phone="9000000002", business_name="Other Co")
    headers = {"Authorization": f"Bearer {other['access_token']}"}

    response = client.get(f"/invoices/{invoice['id']}", headers=headers)

    assert response.status_code == 404
    assert client.get("/invoices/", headers=headers).json()["total"] == 0


def test_update_line_items_recomputes_totals(client, auth_headers, create_invoice):
    invoice = create_invoice()

    response = client.put(
        f"/invoices/{invoice['id']}",
        json={"line_items": [{"quantity": 2, "unit_price": 50, "tax_rate": 18}]},
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert D(body["subtotal"]) == D("100")
    assert D(body["final_amount"]) == D("118")
    assert len(body["lines"]) == 1
    assert body["invoice_number"] == invoice["invoice_number"]

    response = client.put(
        f"/invoices/{invoice['id']}",
        json={"discount_amount": 18, "notes": "Repeat order"},
        headers=auth_headers,
    )
    body = response.json()
    assert D(body["discount_amount"]) == D("18")
    assert D(body["final_amount"]) == D("100")
    assert body["notes"] == "Repeat order"


def test_update_without_amount_changes_keeps_totals(client, auth_headers, create_invoice):
    invoice = create_invoice()

    response = client.put(
        f"/invoices/{invoice['id']}",
        json={"customer_name": "Globex Retail Pvt Ltd"},
        headers=auth_headers,
    )

    body = response.json()
    assert body["customer_name"] == "Globex Retail Pvt Ltd"
    assert D(body["final_amount"]) == D("354")
    assert [line["id"] for line in body["lines"]] == [
        line["id"] for line in invoice["lines"]
    ]


def test_amount_edit_keeps_paid_status(client, auth_headers, create_invoice):
    invoice = create_invoice(
        line_items=[{"quantity": 1, "unit_price": 100, "tax_rate": 0}]
    )
    client.put(
        f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=auth_headers
    )

    response = client.put(
        f"/invoices/{invoice['id']}",
        json={"line_items": [{"quantity": 2, "unit_price": 100, "tax_rate": 0}]},
        headers=auth_headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "paid"
    assert body["paid_date"] is not None
    assert body["payment_status"] == "partial"
    assert D(body["paid_amount"]) == D("100")
    assert D(body["balance_amount"]) == D("100")


def test_amount_edit_on_partly_paid_invoice(client, auth_headers, create_invoice):
    invoice = create_invoice(
        line_items=[{"quantity": 1, "unit_price": 100, "tax_rate": 0}]
    )
    client.post(
        f"/invoices/{invoice['id']}/payments", json={"amount": 40}, headers=auth_headers
    )

    body = client.put(
        f"/invoices/{invoice['id']}",
        json={"line_items": [{"quantity": 1, "unit_price": 40, "tax_rate": 0}]},
        headers=auth_headers,
    ).json()

    assert body["payment_status"] == "paid"
    assert body["status"] == "paid"
    assert D(body["balance_amount"]) == 0


def test_saved_lines_recompute_to_same_totals(client, auth_headers, create_invoice):
    invoice = create_invoice(
        line_items=[{"quantity": 1000, "unit_price": "0.005", "tax_rate": "12.345"}]
    )
    line = invoice["lines"][0]
    assert D(line["unit_price"]) == D("0.01")
    assert D(line["tax_rate"]) == D("12.35")
    assert D(line["line_total"]) == D("10.00")

    body = client.put(
        f"/invoices/{invoice['id']}", json={"other_charges": 0}, headers=auth_headers
    ).json()

    for key in ("subtotal", "total_tax_amount", "final_amount", "balance_amount"):
        assert D(body[key]) == D(invoice[key]), key


def test_mark_paid_sets_amounts(client, auth_headers, create_invoice):
    invoice = create_invoice()

    response = client.put(
        f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=auth_headers
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "paid"
    assert body["payment_status"] == "paid"
    assert D(body["paid_amount"]) == D("354")
    assert D(body["balance_amount"]) == 0
    assert body["paid_date"] is not None


def test_reopening_paid_invoice_restores_balance(client, auth_headers, create_invoice):
    invoice = create_invoice()
    url = f"/invoices/{invoice['id']}/status"
    client.put(url, json={"status": "paid"}, headers=auth_headers)

    body = client.put(url, json={"status": "pending"}, headers=auth_headers).json()

    assert body["status"] == "pending"
    assert D(body["paid_amount"]) == 0
    assert D(body["balance_amount"]) == D("354")
    assert body["paid_date"] is None


@pytest.mark.parametrize(
    "path, target",
    [
        (["paid"], "cancelled"),
        (["cancelled"], "pending"),
        (["cancelled"], "paid"),
        ([], "completed"),
    ],
)
def test_illegal_status_transitions_conflict(
    client, auth_headers, create_invoice, path, target
):
    invoice = create_invoice()
    url = f"/invoices/{invoice['id']}/status"
    for step in path:
        assert client.put(url, json={"status": step}, headers=auth_headers).status_code == 200

    response = client.put(url, json={"status": target}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["field"] == "status"


def test_unknown_status_is_rejected(client, auth_headers, create_invoice):
    invoice = create_invoice()

    response = client.put(
        f"/invoices/{invoice['id']}/status",
        json={"status": "archived"},
        headers=auth_headers,
    )

    assert response.status_code == 400


def test_payments_move_invoice_to_paid(client, auth_headers, create_invoice):
    invoice = create_invoice()
    url = f"/invoices/{invoice['id']}/payments"

    response = client.post(
        url, json={"amount": "100", "method": "UPI"}, headers=auth_headers
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert D(body["paid_amount"]) == D("100")
    assert D(body["balance_amount"]) == D("254")
    assert body["payment_status"] == "partial"
    assert body["status"] == "pending"

    body = client.post(url, json={"amount": 254}, headers=auth_headers).json()
    assert body["payment_status"] == "paid"
    assert body["status"] == "paid"

    payments = client.get(url, headers=auth_headers).json()
    assert [D(row["amount"]) for row in payments] == [D("100"), D("254")]
    assert payments[0]["method"] == "UPI"


@pytest.mark.parametrize("amount", [0, -5, "abc", None])
def test_non_positive_payment_is_rejected(client, auth_headers, create_invoice, amount):
    invoice = create_invoice()

    response = client.post(
        f"/invoices/{invoice['id']}/payments",
        json={"amount": amount},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["field"] == "amount"


def test_payment_on_quotation_conflicts(client, auth_headers, create_invoice):
    quotation = create_invoice(invoice_type="QUOTATION")

    response = client.post(
        f"/invoices/{quotation['id']}/payments",
        json={"amount": 10},
        headers=auth_headers,
    )

    assert response.status_code == 409


def test_payment_on_cancelled_invoice_conflicts(client, auth_headers, create_invoice):
    invoice = create_invoice()
    client.put(
        f"/invoices/{invoice['id']}/status",
        json={"status": "cancelled"},
        headers=auth_headers,
    )

    response = client.post(
        f"/invoices/{invoice['id']}/payments",
        json={"amount": 10},
        headers=auth_headers,
    )

    assert response.status_code == 409


def test_delete_invoice(client, auth_headers, create_invoice):
    invoice = create_invoice()

    response = client.delete(f"/invoices/{invoice['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert client.get(f"/invoices/{invoice['id']}", headers=auth_headers).status_code == 404


def test_invoices_require_authentication(client):
    response = client.get("/invoices/")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}
