from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException
from datetime import datetime, timedelta
from typing import Optional
import secrets
import string
from app.core_settings import get_settings
from app.domain.enums import STATUS_DESCRIPTIONS, PackageStatus, ServiceLevel
from app.domain.models import Package, TrackingEvent, User, utcnow
from .schemas import PackageCreate, PackageUpdate, StatusUpdate
from shared.core import get_logger

logger = get_logger(__name__)

TRACKING_ALPHABET = string.ascii_uppercase + string.digits
MAX_TRACKING_ATTEMPTS = 10
DELIVERY_DAYS = {ServiceLevel.STANDARD.value: 7, ServiceLevel.EXPRESS.value: 3}

class PackageService:
    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def _generate_tracking_id(self) -> str:
        """Random ``ST-XXXXXXXXX`` code, retried until unused."""
        prefix = self.settings.TRACKING_PREFIX
        length = self.settings.TRACKING_SUFFIX_LENGTH
        for _ in range(MAX_TRACKING_ATTEMPTS):
            candidate = prefix + "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(length))
            if not self.db.query(Package.id).filter(Package.tracking_id == candidate).first():
                return candidate
        raise RuntimeError("Could not allocate a unique tracking id")

    def tracking_url(self, package: Package) -> str:
        return f"{self.settings.PUBLIC_BASE_URL.rstrip('/')}/track/{package.tracking_id}"

    def list(self, status: Optional[str] = None, search: Optional[str] = None, skip: int = 0, limit: int = 100):
        query = self.db.query(Package)
        if status:
            query = query.filter(Package.current_status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Package.tracking_id.ilike(pattern), Package.recipient_name.ilike(pattern)))
        return query.order_by(Package.created_at.desc(), Package.id.desc()).offset(skip).limit(limit).all()

    def get(self, package_id: int) -> Package:
        package = self.db.get(Package, package_id)
        if not package:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    def get_by_tracking_id(self, tracking_id: str) -> Optional[Package]:
        return self.db.query(Package).filter(Package.tracking_id == tracking_id).first()

    def for_user(self, user: User):
        return (
            self.db.query(Package)
            .filter(or_(
                Package.created_by == user.id,
                Package.sender_email == user.email,
                Package.recipient_email == user.email,
            ))
            .order_by(Package.created_at.desc(), Package.id.desc())
            .all()
        )

    def create(self, data: PackageCreate, created_by: str, commit: bool = True) -> tuple[Package, TrackingEvent]:
        """Insert the package with its initial ``created`` event.

        With ``commit=False`` the rows are only flushed, leaving the caller to
        commit them together with its own changes.
        """
        payload = data.model_dump()
        now = utcnow()
        if payload.get("estimated_delivery") is None:
            payload["estimated_delivery"] = now + timedelta(days=DELIVERY_DAYS[payload["service_level"]])

        package = Package(
            **payload,
            tracking_id=self._generate_tracking_id(),
            current_status=PackageStatus.CREATED.value,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        event = TrackingEvent(
            status=PackageStatus.CREATED.value,
            location=package.current_location,
            description=STATUS_DESCRIPTIONS[PackageStatus.CREATED.value],
            timestamp=now,
        )
        package.events.append(event)
        self.db.add(package)
        if not commit:
            self.db.flush()
            return package, event
        self.db.commit()
        self.db.refresh(package)
        logger.info(
            f"Package {package.tracking_id} created",
            extra={'extra_fields': {'package_id': package.id, 'created_by': created_by}},
        )
        return package, event

    def update(self, package_id: int, data: PackageUpdate) -> Package:
        package = self.get(package_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(package, key, value)
        package.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(package)
        return package

    def update_status(self, package_id: int, data: StatusUpdate) -> tuple[Package, TrackingEvent]:
        """Write the new status and append its tracking event in one commit.

        ``actual_delivery`` is stamped only when the new status is delivered;
        any status may follow any other.
        """
        package = self.get(package_id)
        now = utcnow()
        previous = package.current_status

        package.current_status = data.status
        if data.location is not None:
            package.current_location = data.location
        if data.status == PackageStatus.DELIVERED.value:
            package.actual_delivery = now
        package.updated_at = now

        event = TrackingEvent(
            status=data.status,
            location=data.location,
            description=data.description or STATUS_DESCRIPTIONS[data.status],
            timestamp=now,
        )
        package.events.append(event)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(package)
        logger.info(
            f"Package {package.tracking_id} status {previous} -> {data.status}",
            extra={'extra_fields': {'package_id': package.id, 'location': data.location}},
        )
        return package, event

    def events(self, package_id: int):
        return self.get(package_id).events
