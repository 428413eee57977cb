from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.infrastructure.db import get_db
from app.application.events import PackageEvents
from app.application.invoice_service import InvoiceService
from app.application.service import PackageService
from app.application.schemas import InvoiceCreate, InvoicePaymentUpdate, InvoiceRead, PackageCreated, PackageRead
from app.domain.enums import PaymentStatus
from app.domain.models import User
from .deps import get_package_events, require_admin

router = APIRouter(prefix="/api/invoices", tags=["invoices"])

@router.post("", response_model=InvoiceRead, status_code=201)
def create_invoice(payload: InvoiceCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return InvoiceService(db).create(payload)

@router.get("", response_model=list[InvoiceRead])
def list_invoices(
    payment_status: Optional[PaymentStatus] = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return InvoiceService(db).list(payment_status=payment_status.value if payment_status else None)

@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return InvoiceService(db).get(invoice_id)

@router.patch("/{invoice_id}/payment", response_model=InvoiceRead)
def update_invoice_payment(
    invoice_id: int,
    payload: InvoicePaymentUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return InvoiceService(db).update_payment(invoice_id, payload)

@router.post("/{invoice_id}/convert-to-package", response_model=PackageCreated, status_code=201)
def convert_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    events: PackageEvents = Depends(get_package_events),
):
    package, event = InvoiceService(db).convert_to_package(invoice_id, created_by=admin.id)
    events.created(package, event)
    body = PackageRead.model_validate(package).model_dump()
    return PackageCreated(**body, tracking_url=PackageService(db).tracking_url(package))
