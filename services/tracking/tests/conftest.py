import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["NOTIFICATION_EMAIL_DELAY_MS"] = "0"
os.environ["NOTIFICATION_SMS_DELAY_MS"] = "0"
os.environ["PUBLIC_BASE_URL"] = "https://shipnix.test"
for var in ("REDIS_URL", "EMAIL_WEBHOOK_URL", "SMS_WEBHOOK_URL", "RUN_MIGRATIONS"):
    os.environ.pop(var, None)

import pytest
from fastapi.testclient import TestClient
from app.main import app
from app.auth_local import create_access_token
from app.domain.models import Base, User
from app.infrastructure.db import SessionLocal, engine

@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    app.state.cache.clear()
    yield

@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c

def make_user(email: str, role: str = "customer") -> User:
    with SessionLocal() as db:
        user = User(email=email, first_name="Test", last_name=role.title(), role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, role=user.role)}"}

@pytest.fixture
def admin_user():
    return make_user("admin@shipnix.example.com", role="admin")

@pytest.fixture
def customer_user():
    return make_user("maria.santos@example.com")

@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)

@pytest.fixture
def customer_headers(customer_user):
    return auth_headers(customer_user)

@pytest.fixture
def package_payload():
    return {
        "sender_name": "TechShop International",
        "sender_address": "123 Commerce St, New York, NY 10001, USA",
        "sender_email": "orders@techshop.example.com",
        "recipient_name": "Maria Santos",
        "recipient_address": "Rua das Flores 456, Sao Paulo, Brazil",
        "recipient_email": "maria.santos@example.com",
        "recipient_phone": "+55-11-9876-5432",
        "description": "Laptop",
        "weight": 2.1,
        "dimensions": "35x25x2 cm",
        "shipping_cost": 89.99,
        "payment_method": "card",
        "payment_status": "paid",
        "current_location": "New York Warehouse",
    }

@pytest.fixture
def created_package(client, admin_headers, package_payload):
    resp = client.post("/api/packages", json=package_payload, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()

@pytest.fixture
def user_factory():
    return make_user

@pytest.fixture
def headers_for():
    return auth_headers
