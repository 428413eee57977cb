"""Load an admin account and the demo shipments into the tracking database.

Run from the repository root after installing the project:

    SEED_ADMIN_EMAIL=admin@shipnix.test SEED_ADMIN_PASSWORD=... python services/seed/seed.py
"""
import csv
import os
from datetime import timedelta
from pathlib import Path
from sqlalchemy.orm import Session
from app.auth_local import hash_password
from app.domain.enums import PackageStatus
from app.domain.models import Package, TrackingEvent, User, utcnow
from app.infrastructure.db import SessionLocal, init_models, wait_for_database

DATA_DIR = Path(__file__).resolve().parent / "shipnix_seed_data"

def read_rows(file: str) -> list[dict]:
    with open(DATA_DIR / file, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))

def ensure_admin(db: Session, email: str, password: str) -> User:
    """Create the admin account, or promote an existing user with that email."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if user is None:
        user = User(email=email.lower(), first_name="Shipnix", last_name="Admin", role="admin",
                    password_hash=hash_password(password))
        db.add(user)
        print(f"Created admin {email}")
    else:
        user.role = "admin"
        print(f"Promoted {email} to admin")
    db.commit()
    db.refresh(user)
    return user

def load_packages(db: Session, created_by: str) -> int:
    """Insert demo packages with their event history; existing tracking ids are skipped."""
    events_by_package: dict[str, list[dict]] = {}
    for row in read_rows("tracking_events.csv"):
        events_by_package.setdefault(row["tracking_id"], []).append(row)

    now = utcnow()
    loaded = 0
    for row in read_rows("packages.csv"):
        tracking_id = row["tracking_id"]
        if db.query(Package.id).filter(Package.tracking_id == tracking_id).first():
            print(f"  {tracking_id} already present, skipping")
            continue
        days = int(row["estimated_days"])
        package = Package(
            tracking_id=tracking_id,
            sender_name=row["sender_name"],
            sender_address=row["sender_address"],
            sender_phone=row["sender_phone"] or None,
            sender_email=row["sender_email"] or None,
            recipient_name=row["recipient_name"],
            recipient_address=row["recipient_address"],
            recipient_phone=row["recipient_phone"] or None,
            recipient_email=row["recipient_email"] or None,
            description=row["description"],
            weight=float(row["weight"]),
            dimensions=row["dimensions"],
            shipping_cost=float(row["shipping_cost"]),
            payment_method=row["payment_method"],
            payment_status=row["payment_status"],
            service_level=row["service_level"],
            current_status=row["current_status"],
            current_location=row["current_location"],
            estimated_delivery=now + timedelta(days=days),
            created_by=created_by,
        )
        history = sorted(events_by_package.get(tracking_id, []), key=lambda e: -int(e["days_ago"]))
        for event in history:
            package.events.append(TrackingEvent(
                status=event["status"],
                location=event["location"],
                description=event["description"],
                timestamp=now - timedelta(days=int(event["days_ago"])),
            ))
        if history:
            package.created_at = package.events[0].timestamp
            package.updated_at = package.events[-1].timestamp
        if package.current_status == PackageStatus.DELIVERED.value and history:
            package.actual_delivery = package.events[-1].timestamp
        db.add(package)
        loaded += 1
    db.commit()
    print(f"Loaded {loaded} packages")
    return loaded

def main():
    wait_for_database()
    init_models()
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@shipnix-express.com")
    password = os.getenv("SEED_ADMIN_PASSWORD")
    if not password:
        raise SystemExit("SEED_ADMIN_PASSWORD is required")
    with SessionLocal() as db:
        admin = ensure_admin(db, email, password)
        load_packages(db, created_by=admin.id)
    print("Seed complete.")

if __name__ == "__main__":
    main()
