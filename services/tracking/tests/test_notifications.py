from datetime import datetime, timezone
import httpx
import pytest
from app.application.notifications import (
    LoggingSender,
    NotificationService,
    SenderError,
    WebhookSender,
    status_message,
)
from app.application.schemas import PackageCreate
from app.application.service import PackageService
from app.domain.models import Notification
from app.infrastructure.db import SessionLocal

class RecordingSender:
    def __init__(self):
        self.sent = []

    def send(self, recipient, subject, message):
        self.sent.append((recipient, subject, message))

class BrokenSender:
    def send(self, recipient, subject, message):
        raise ConnectionError("provider down")

def _create_package(admin_user, **overrides):
    fields = {
        "sender_name": "Fashion World Ltd",
        "sender_address": "87 Oxford Street, London",
        "recipient_name": "Ahmed Hassan",
        "recipient_address": "Sheikh Zayed Road, Dubai",
        "recipient_email": "ahmed.hassan@example.com",
        "recipient_phone": "+971-4-123-4567",
        "weight": 1.5,
        "shipping_cost": 65.5,
        "payment_method": "paypal",
    }
    fields.update(overrides)
    with SessionLocal() as db:
        package, _ = PackageService(db).create(PackageCreate(**fields), created_by=admin_user.id)
        return package

def _notifications(package_id):
    with SessionLocal() as db:
        return db.query(Notification).filter(Notification.package_id == package_id).order_by(Notification.id).all()

def test_status_update_scenario_records_email_notification(client, admin_headers, created_package):
    resp = client.patch(
        f"/api/packages/{created_package['id']}/status",
        json={"status": "in_transit", "location": "JFK"},
        headers=admin_headers,
    )
    assert resp.status_code == 200

    records = client.get(f"/api/packages/{created_package['id']}/notifications", headers=admin_headers).json()
    in_transit = [n for n in records if n["message"].startswith(status_message("in_transit"))]
    emails = [n for n in in_transit if n["type"] == "email"]
    assert len(emails) == 1
    assert emails[0]["status"] in ("sent", "failed")
    assert emails[0]["subject"] == f"Package Update - {created_package['tracking_id']}"
    assert f"https://shipnix.test/track/{created_package['tracking_id']}" in emails[0]["message"]

    sms = [n for n in in_transit if n["type"] == "sms"]
    assert sms[0]["message"].endswith(f"Tracking: {created_package['tracking_id']}")

def test_creation_sends_created_notification(client, admin_headers, created_package):
    records = client.get(f"/api/packages/{created_package['id']}/notifications", headers=admin_headers).json()
    assert {n["type"] for n in records} == {"email", "sms"}
    assert all(n["message"].startswith(status_message("created")) for n in records)
    assert all(n["status"] == "sent" for n in records)

def test_channels_fail_independently(admin_user):
    package = _create_package(admin_user)
    email = BrokenSender()
    sms = RecordingSender()
    service = NotificationService(SessionLocal, email, sms, "https://shipnix.test")

    service.send_package_status_update(package.id, "delivered")

    records = _notifications(package.id)
    by_type = {n.type: n for n in records}
    assert by_type["email"].status == "failed"
    assert by_type["email"].error_message == "provider down"
    assert by_type["email"].sent_at is None
    assert by_type["sms"].status == "sent"
    assert by_type["sms"].sent_at is not None
    assert sms.sent[0][2].startswith(status_message("delivered"))

def test_no_contact_details_means_no_records(admin_user):
    package = _create_package(admin_user, recipient_email=None, recipient_phone=None)
    service = NotificationService(SessionLocal, RecordingSender(), RecordingSender(), "https://shipnix.test")
    assert service.send_package_status_update(package.id, "in_transit") == []
    assert _notifications(package.id) == []

def test_unknown_package_is_ignored(admin_user):
    service = NotificationService(SessionLocal, BrokenSender(), BrokenSender(), "https://shipnix.test")
    assert service.send_package_status_update(12345, "in_transit") == []

def test_status_without_template_uses_fallback_text():
    assert status_message("picked_up") == "Your package status has been updated to: picked_up"
    assert status_message("out_for_delivery").startswith("Great news!")

def test_delivery_reminder_mentions_date_and_slot(admin_user):
    package = _create_package(
        admin_user,
        scheduled_delivery_date=datetime(2030, 3, 15, 9, 0, tzinfo=timezone.utc),
        scheduled_time_slot="morning",
        recipient_phone=None,
    )
    sender = RecordingSender()
    service = NotificationService(SessionLocal, sender, RecordingSender(), "https://shipnix.test")

    sent = service.send_delivery_reminder(package.id)

    assert len(sent) == 1
    recipient, subject, message = sender.sent[0]
    assert recipient == "ahmed.hassan@example.com"
    assert subject == f"Delivery Reminder - {package.tracking_id}"
    assert "Friday, March 15, 2030 between 8AM - 12PM." in message

def test_reminder_endpoint_requires_scheduled_date(client, admin_headers, created_package):
    url = f"/api/packages/{created_package['id']}/reminders"
    assert client.post(url, headers=admin_headers).status_code == 409

    client.patch(
        f"/api/packages/{created_package['id']}",
        json={"scheduled_delivery_date": "2030-03-15T09:00:00Z", "scheduled_time_slot": "evening"},
        headers=admin_headers,
    )
    resp = client.post(url, headers=admin_headers)
    assert resp.status_code == 202
    records = client.get(f"/api/packages/{created_package['id']}/notifications", headers=admin_headers).json()
    assert any("between 5PM - 8PM" in n["message"] for n in records)

def test_webhook_sender_posts_json_and_raises_on_error():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(502)

    sender = WebhookSender("email", "https://hooks.example.com/email", transport=httpx.MockTransport(handler))
    with pytest.raises(SenderError):
        sender.send("a@example.com", "Subject", "Body")
    assert seen[0].method == "POST"
    assert b'"to":"a@example.com"' in seen[0].content.replace(b" ", b"")

def test_logging_sender_records_message(caplog):
    caplog.set_level("INFO")
    LoggingSender("sms").send("+1-555", None, "hello")
    assert any("Sending sms to +1-555" in r.getMessage() for r in caplog.records)
