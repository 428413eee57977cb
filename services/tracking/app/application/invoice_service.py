from sqlalchemy.orm import Session
from fastapi import HTTPException
from datetime import timedelta
from typing import Optional
from app.domain.enums import PaymentMethod, PaymentStatus
from app.domain.models import Invoice, Package, TrackingEvent, utcnow
from .quote_service import INVOICE_DUE_DAYS, commit_numbered
from .schemas import InvoiceCreate, InvoicePaymentUpdate, PackageCreate
from .service import PackageService
from shared.core import get_logger

logger = get_logger(__name__)

class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, payment_status: Optional[str] = None):
        query = self.db.query(Invoice)
        if payment_status:
            query = query.filter(Invoice.payment_status == payment_status)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    def get(self, invoice_id: int) -> Invoice:
        invoice = self.db.get(Invoice, invoice_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def create(self, data: InvoiceCreate) -> Invoice:
        payload = data.model_dump()
        if payload.get("due_date") is None:
            payload["due_date"] = utcnow() + timedelta(days=INVOICE_DUE_DAYS)
        invoice = Invoice(
            **payload,
            payment_status=PaymentStatus.PENDING.value,
        )
        commit_numbered(self.db, invoice, "invoice_number", Invoice.invoice_number, "INV")
        self.db.refresh(invoice)
        return invoice

    def update_payment(self, invoice_id: int, data: InvoicePaymentUpdate) -> Invoice:
        invoice = self.get(invoice_id)
        invoice.payment_status = data.payment_status
        if data.payment_method:
            invoice.payment_method = data.payment_method
        if data.payment_status == PaymentStatus.PAID.value:
            invoice.paid_at = invoice.paid_at or utcnow()
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def convert_to_package(self, invoice_id: int, created_by: str) -> tuple[Package, TrackingEvent]:
        """Create the shipment for a paid, quote-backed invoice."""
        invoice = self.get(invoice_id)
        if invoice.payment_status != PaymentStatus.PAID.value:
            raise HTTPException(status_code=409, detail="Invoice must be paid before shipping")
        if invoice.package_id is not None:
            raise HTTPException(status_code=409, detail="Invoice already converted to a package")
        quote = invoice.quote
        if quote is None:
            raise HTTPException(status_code=409, detail="Invoice has no shipment details")

        data = PackageCreate(
            sender_name=quote.sender_name,
            sender_address=quote.sender_address,
            sender_phone=quote.sender_phone,
            sender_email=quote.sender_email,
            recipient_name=quote.recipient_name,
            recipient_address=quote.recipient_address,
            recipient_phone=quote.recipient_phone,
            recipient_email=quote.recipient_email,
            description=quote.description,
            weight=float(quote.weight),
            dimensions=quote.dimensions,
            shipping_cost=float(invoice.amount),
            payment_method=invoice.payment_method or PaymentMethod.CARD.value,
            payment_status=PaymentStatus.PAID.value,
            scheduled_time_slot=quote.delivery_time_slot,
        )
        # Package, first event and the invoice link land in one commit
        package, event = PackageService(self.db).create(data, created_by=created_by, commit=False)
        invoice.package_id = package.id
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(package)
        logger.info(
            f"Invoice {invoice.invoice_number} shipped as {package.tracking_id}",
            extra={'extra_fields': {'invoice_id': invoice.id, 'package_id': package.id}},
        )
        return package, event
