from seed import ensure_admin, load_packages
from app.auth_local import verify_password
from app.domain.models import Package
from app.infrastructure.db import SessionLocal

def test_ensure_admin_creates_then_promotes(customer_user):
    with SessionLocal() as db:
        admin = ensure_admin(db, "Ops@Shipnix.example.com", "admin-password")
        assert admin.role == "admin"
        assert admin.email == "ops@shipnix.example.com"
        assert verify_password("admin-password", admin.password_hash)

        promoted = ensure_admin(db, customer_user.email, "ignored-password")
        assert promoted.id == customer_user.id
        assert promoted.role == "admin"

def test_load_packages_is_idempotent(admin_user):
    with SessionLocal() as db:
        first = load_packages(db, created_by=admin_user.id)
        assert first == 3
        assert load_packages(db, created_by=admin_user.id) == 0

        delivered = db.query(Package).filter(Package.tracking_id == "ST-DEMO67890").one()
        assert delivered.current_status == "delivered"
        assert delivered.actual_delivery is not None
        assert delivered.events[-1].status == "delivered"
        assert [e.timestamp for e in delivered.events] == sorted(e.timestamp for e in delivered.events)

def test_seeded_package_is_publicly_trackable(client, admin_user):
    with SessionLocal() as db:
        load_packages(db, created_by=admin_user.id)
    body = client.get("/api/public/track/st-demo12345").json()
    assert body["current_status"] == "out_for_delivery"
    assert body["events"][0]["status"] == "created"
