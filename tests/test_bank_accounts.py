import pytest


def _account(client, headers, expected=201, **fields):
    payload = {
        "account_holder_name": "Acme Traders",
        "bank_name": "State Bank",
        "account_number": "123456789012",
        "ifsc_code": "SBIN0001234",
        **fields,
    }
    response = client.post("/bank-accounts/", json=payload, headers=headers)
    assert response.status_code == expected, response.text
    return response.json()


def _primary_ids(client, headers):
    rows = client.get("/bank-accounts/", headers=headers).json()
    return [row["id"] for row in rows if row["is_primary"]]


def test_first_account_becomes_primary(client, auth_headers):
    first = _account(client, auth_headers)
    second = _account(client, auth_headers, bank_name="HDFC Bank")

    assert first["is_primary"] is True
    assert second["is_primary"] is False
    assert _primary_ids(client, auth_headers) == [first["id"]]


def test_new_primary_clears_previous(client, auth_headers):
    first = _account(client, auth_headers)
    second = _account(client, auth_headers, is_primary=True)

    assert _primary_ids(client, auth_headers) == [second["id"]]

    response = client.put(f"/bank-accounts/{first['id']}/primary", headers=auth_headers)
    assert response.status_code == 200
    assert _primary_ids(client, auth_headers) == [first["id"]]


def test_deleting_primary_promotes_next(client, auth_headers):
    first = _account(client, auth_headers)
    second = _account(client, auth_headers, bank_name="HDFC Bank")

    response = client.delete(f"/bank-accounts/{first['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert _primary_ids(client, auth_headers) == [second["id"]]


def test_deactivating_primary_promotes_next(client, auth_headers):
    first = _account(client, auth_headers)
    second = _account(client, auth_headers, bank_name="HDFC Bank")

    body = client.put(
        f"/bank-accounts/{first['id']}", json={"is_active": False}, headers=auth_headers
    ).json()

    assert body["is_primary"] is False
    assert _primary_ids(client, auth_headers) == [second["id"]]


def test_inactive_account_cannot_be_primary(client, auth_headers):
    _account(client, auth_headers)
    spare = _account(client, auth_headers, bank_name="HDFC Bank")
    client.put(
        f"/bank-accounts/{spare['id']}", json={"is_active": False}, headers=auth_headers
    )

    response = client.put(f"/bank-accounts/{spare['id']}/primary", headers=auth_headers)

    assert response.status_code == 400


@pytest.mark.parametrize(
    "field, value",
    [("ifsc_code", "SBIN1234"), ("pan_card_number", "ABCDE12345"), ("account_type", "Loan")],
)
def test_invalid_details_are_rejected(client, auth_headers, field, value):
    body = _account(client, auth_headers, expected=400, **{field: value})

    assert body["field"] == field


def test_codes_are_uppercased(client, auth_headers):
    body = _account(client, auth_headers, ifsc_code="hdfc0000123", pan_card_number="abcde1234f")

    assert body["ifsc_code"] == "HDFC0000123"
    assert body["pan_card_number"] == "ABCDE1234F"


def test_validate_endpoint(client, auth_headers):
    response = client.post(
        "/bank-accounts/validate",
        json={"ifsc_code": "sbin0001234", "pan_card_number": "12345"},
        headers=auth_headers,
    )

    assert response.json() == {"ifsc_valid": True, "pan_valid": False}


def test_other_tenant_account_is_not_found(client, auth_headers, make_owner):
    account = _account(client, auth_headers)
    other = make_owner(phone="9000000002", business_name="Other Co")

    response = client.delete(
        f"/bank-accounts/{account['id']}",
        headers={"Authorization": f"Bearer {other['access_token']}"},
    )

    assert response.status_code == 404
