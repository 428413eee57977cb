"""
Customer notifications for package events.

Each dispatch writes one ``Notification`` row per channel (email, SMS) in
``pending`` state, hands the message to that channel's sender, then marks
the row ``sent`` or ``failed``. Dispatch runs after the triggering request
has committed, in its own database session, and never raises: failures are
recorded on the row and logged.
"""
import time
from typing import Callable, Optional
import httpx
from sqlalchemy.orm import Session
from app.core_settings import Settings
from app.domain.enums import NotificationStatus, NotificationType, TIME_SLOT_HOURS
from app.domain.models import Notification, Package, as_utc, utcnow
from shared.core import get_logger

logger = get_logger(__name__)

STATUS_MESSAGES = {
    "created": "Your package has been created and is being prepared for shipping.",
    "in_transit": "Your package is on its way! It has left our facility and is in transit.",
    "out_for_delivery": "Great news! Your package is out for delivery and will arrive today.",
    "delivered": "Your package has been successfully delivered. Thank you for choosing Shipnix-Express!",
}

def status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, f"Your package status has been updated to: {status}")

class SenderError(Exception):
    """A sender could not hand the message to its provider."""

class LoggingSender:
    """Writes the message to the log and waits a simulated provider delay."""

    def __init__(self, channel: str, delay_seconds: float = 0.0):
        self.channel = channel
        self.delay_seconds = delay_seconds

    def send(self, recipient: str, subject: Optional[str], message: str) -> None:
        logger.info(
            f"Sending {self.channel} to {recipient}",
            extra={'extra_fields': {'channel': self.channel, 'subject': subject, 'message': message}},
        )
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

class WebhookSender:
    """POSTs the message as JSON to a provider bridge."""

    def __init__(self, channel: str, url: str, timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None):
        self.channel = channel
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def send(self, recipient: str, subject: Optional[str], message: str) -> None:
        payload = {"channel": self.channel, "to": recipient, "subject": subject, "message": message}
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(self.url, json=payload)
        if response.status_code >= 400:
            raise SenderError(f"{self.channel} provider returned {response.status_code}")

class NotificationService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        email_sender,
        sms_sender,
        public_base_url: str,
    ):
        self.session_factory = session_factory
        self.email_sender = email_sender
        self.sms_sender = sms_sender
        self.public_base_url = public_base_url.rstrip("/")

    def tracking_url(self, tracking_id: str) -> str:
        return f"{self.public_base_url}/track/{tracking_id}"

    def send_package_status_update(self, package_id: int, status: str) -> list[Notification]:
        try:
            with self.session_factory() as db:
                package = db.get(Package, package_id)
                if package is None:
                    logger.warning(f"Skipping notification: package {package_id} not found")
                    return []
                text = status_message(status)
                tracking_id = package.tracking_id
                return self._dispatch(
                    db,
                    package,
                    subject=f"Package Update - {tracking_id}",
                    email_message=f"{text}\n\nTracking ID: {tracking_id}\nTrack your package: {self.tracking_url(tracking_id)}",
                    sms_message=f"{text} Tracking: {tracking_id}",
                )
        except Exception:
            logger.error(f"Status notification for package {package_id} failed", exc_info=True)
            return []

    def send_delivery_reminder(self, package_id: int) -> list[Notification]:
        try:
            with self.session_factory() as db:
                package = db.get(Package, package_id)
                if package is None or package.scheduled_delivery_date is None:
                    logger.warning(f"Skipping reminder: package {package_id} has no scheduled delivery")
                    return []
                text = self.reminder_message(package)
                return self._dispatch(
                    db,
                    package,
                    subject=f"Delivery Reminder - {package.tracking_id}",
                    email_message=f"{text}\n\nTrack your package: {self.tracking_url(package.tracking_id)}",
                    sms_message=text,
                )
        except Exception:
            logger.error(f"Delivery reminder for package {package_id} failed", exc_info=True)
            return []

    @staticmethod
    def reminder_message(package: Package) -> str:
        date = as_utc(package.scheduled_delivery_date).strftime("%A, %B %d, %Y")
        text = f"Reminder: Your package ({package.tracking_id}) is scheduled for delivery on {date}"
        slot = TIME_SLOT_HOURS.get(package.scheduled_time_slot or "")
        if slot:
            return f"{text} between {slot}."
        return f"{text}."

    def _dispatch(self, db: Session, package: Package, subject: str, email_message: str, sms_message: str):
        sent = []
        if package.recipient_email:
            sent.append(self._deliver(
                db, package, NotificationType.EMAIL.value, self.email_sender,
                recipient=package.recipient_email, subject=subject, message=email_message,
            ))
        if package.recipient_phone:
            sent.append(self._deliver(
                db, package, NotificationType.SMS.value, self.sms_sender,
                recipient=package.recipient_phone, subject=None, message=sms_message,
            ))
        return sent

    def _deliver(self, db: Session, package: Package, channel: str, sender, recipient: str,
                 subject: Optional[str], message: str) -> Notification:
        notification = Notification(
            package_id=package.id,
            type=channel,
            recipient_email=recipient if channel == NotificationType.EMAIL.value else None,
            recipient_phone=recipient if channel == NotificationType.SMS.value else None,
            subject=subject,
            message=message,
            status=NotificationStatus.PENDING.value,
            auto_send=True,
        )
        db.add(notification)
        db.commit()

        try:
            sender.send(recipient, subject, message)
            notification.status = NotificationStatus.SENT.value
            notification.sent_at = utcnow()
        except Exception as e:
            logger.warning(
                f"{channel} notification {notification.id} failed: {e}",
                extra={'extra_fields': {'package_id': package.id, 'channel': channel}},
            )
            notification.status = NotificationStatus.FAILED.value
            notification.error_message = str(e)
        db.commit()
        return notification

def build_notification_service(settings: Settings, session_factory: Callable[[], Session]) -> NotificationService:
    if settings.EMAIL_WEBHOOK_URL:
        email_sender = WebhookSender("email", settings.EMAIL_WEBHOOK_URL, settings.NOTIFICATION_TIMEOUT_SECONDS)
    else:
        email_sender = LoggingSender("email", settings.NOTIFICATION_EMAIL_DELAY_MS / 1000)
    if settings.SMS_WEBHOOK_URL:
        sms_sender = WebhookSender("sms", settings.SMS_WEBHOOK_URL, settings.NOTIFICATION_TIMEOUT_SECONDS)
    else:
        sms_sender = LoggingSender("sms", settings.NOTIFICATION_SMS_DELAY_MS / 1000)
    return NotificationService(session_factory, email_sender, sms_sender, settings.PUBLIC_BASE_URL)
