from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.infrastructure.db import get_db
from app.application.events import PackageEvents
from app.application.service import PackageService
from app.application.schemas import (
    PackageCreate,
    PackageCreated,
    PackageDetail,
    PackageRead,
    PackageUpdate,
    StatusUpdate,
    TrackingEventRead,
    NotificationRead,
)
from app.domain.enums import PackageStatus
from app.domain.models import Notification, User
from .deps import get_package_events, require_admin

router = APIRouter(prefix="/api/packages", tags=["packages"])

@router.get("", response_model=list[PackageRead])
def list_packages(
    status: Optional[PackageStatus] = Query(None, description="Filter by current status"),
    search: Optional[str] = Query(None, max_length=100, description="Tracking id or recipient name"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return PackageService(db).list(status=status.value if status else None, search=search, skip=skip, limit=limit)

@router.post("", response_model=PackageCreated, status_code=201)
def create_package(
    payload: PackageCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    events: PackageEvents = Depends(get_package_events),
):
    service = PackageService(db)
    package, event = service.create(payload, created_by=admin.id)
    events.created(package, event)
    body = PackageRead.model_validate(package).model_dump()
    return PackageCreated(**body, tracking_url=service.tracking_url(package))

@router.get("/{package_id}", response_model=PackageDetail)
def get_package(package_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return PackageService(db).get(package_id)

@router.patch("/{package_id}", response_model=PackageRead)
def update_package(
    package_id: int,
    payload: PackageUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    events: PackageEvents = Depends(get_package_events),
):
    package = PackageService(db).update(package_id, payload)
    events.updated(package)
    return package

@router.patch("/{package_id}/status", response_model=PackageRead)
def update_package_status(
    package_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    events: PackageEvents = Depends(get_package_events),
):
    """Move a package to a new status and record it in the tracking log.

    Notification and broadcast run after the response; their failures are
    logged and do not affect the returned package.
    """
    package, event = PackageService(db).update_status(package_id, payload)
    events.status_changed(package, event)
    return package

@router.get("/{package_id}/events", response_model=list[TrackingEventRead])
def list_package_events(package_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return PackageService(db).events(package_id)

@router.get("/{package_id}/notifications", response_model=list[NotificationRead])
def list_package_notifications(package_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    PackageService(db).get(package_id)
    return (
        db.query(Notification)
        .filter(Notification.package_id == package_id)
        .order_by(Notification.id)
        .all()
    )

@router.post("/{package_id}/reminders", status_code=202)
def send_delivery_reminder(
    package_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    events: PackageEvents = Depends(get_package_events),
):
    package = PackageService(db).get(package_id)
    if package.scheduled_delivery_date is None:
        raise HTTPException(status_code=409, detail="Package has no scheduled delivery date")
    events.reminder_requested(package)
    return {"queued": True, "tracking_id": package.tracking_id}
