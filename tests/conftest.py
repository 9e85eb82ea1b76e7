import os

from passlib.hash import pbkdf2_sha256

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD_HASH", pbkdf2_sha256.hash("admin-pass"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from billing.db import get_db
from billing.main import app
from billing.models import Base


@pytest.fixture()
def engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite+pysqlite:///{db_path}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def SessionLocal(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(SessionLocal):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(SessionLocal):
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_owner(client):
    def _register(phone="9000000001", business_name="Acme Traders", **extra):
        payload = {
            "name": "Asha Rao",
            "phone": phone,
            "password": "secret-pass",
            "business_name": business_name,
            "gstin": "29ABCDE1234F1Z5",
            **extra,
        }
        response = client.post("/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def owner(make_owner):
    return make_owner()


@pytest.fixture()
def auth_headers(owner):
    return {"Authorization": f"Bearer {owner['access_token']}"}


@pytest.fixture()
def customer(client, auth_headers):
    response = client.post(
        "/customers/",
        json={
            "name": "Globex Retail",
            "phone": "9811111111",
            "email": "accounts@globex.example",
            "gstin": "27AAACG1234A1Z9",
            "vendor_code": "VND-77",
            "billing_street": "12 MG Road",
            "billing_city": "Pune",
            "billing_state": "Maharashtra",
            "billing_pincode": "411001",
            "shipping_street": "Plot 4, MIDC",
            "shipping_city": "Nashik",
            "shipping_state": "Maharashtra",
            "shipping_pincode": "422010",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def admin_headers(client):
    response = client.post(
        "/admin/login", json={"username": "admin", "password": "admin-pass"}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
