from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException
from datetime import timedelta
from typing import Callable, Optional
from app.domain.enums import QuoteStatus, TimeSlot
from app.domain.models import Invoice, Quote, utcnow
from .schemas import QuoteCreate, QuoteUpdate
from shared.core import get_logger

logger = get_logger(__name__)

MINIMUM_COST = 15.0
COST_PER_KG = 2.5
QUOTE_VALID_DAYS = 7
INVOICE_DUE_DAYS = 14
NUMBERING_ATTEMPTS = 5
DELIVERY_FEES = {
    TimeSlot.MORNING.value: 0.0,
    TimeSlot.AFTERNOON.value: 5.0,
    TimeSlot.EVENING.value: 15.0,
    TimeSlot.EXPRESS.value: 25.0,
    TimeSlot.WEEKEND.value: 20.0,
}

def price_quote(weight: float, time_slot: str) -> tuple[float, float, float]:
    """Return ``(base_cost, delivery_fee, total_cost)``."""
    base_cost = round(max(MINIMUM_COST, weight * COST_PER_KG), 2)
    delivery_fee = DELIVERY_FEES.get(time_slot, 0.0)
    return base_cost, delivery_fee, round(base_cost + delivery_fee, 2)

def next_document_number(db: Session, column, prefix: str) -> str:
    """Sequential ``PREFIX-YYYY-NNNNN`` numbering per UTC calendar year."""
    year = utcnow().year
    latest = db.query(func.max(column)).filter(column.like(f"{prefix}-{year}-%")).scalar()
    sequence = int(latest.rsplit("-", 1)[1]) + 1 if latest else 1
    return f"{prefix}-{year}-{sequence:05d}"

def commit_numbered(db: Session, record, field: str, column, prefix: str,
                    stage: Optional[Callable[[], None]] = None):
    """Number ``record`` and commit it, renumbering when another writer took the number first.

    ``stage`` re-applies the caller's other changes, since a rollback discards them.
    """
    for attempt in range(1, NUMBERING_ATTEMPTS + 1):
        if stage:
            stage()
        setattr(record, field, next_document_number(db, column, prefix))
        db.add(record)
        try:
            db.commit()
            return record
        except IntegrityError:
            db.rollback()
            if attempt == NUMBERING_ATTEMPTS:
                raise
            logger.warning(f"{prefix} number {getattr(record, field)} already taken, retrying")

class QuoteService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, status: Optional[str] = None):
        query = self.db.query(Quote)
        if status:
            query = query.filter(Quote.status == status)
        return query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()

    def get(self, quote_id: int) -> Quote:
        quote = self.db.get(Quote, quote_id)
        if not quote:
            raise HTTPException(status_code=404, detail="Quote not found")
        return quote

    def create(self, data: QuoteCreate, requested_by: Optional[str] = None) -> Quote:
        base_cost, delivery_fee, total_cost = price_quote(data.weight, data.delivery_time_slot)
        quote = Quote(
            **data.model_dump(),
            base_cost=base_cost,
            delivery_fee=delivery_fee,
            total_cost=total_cost,
            status=QuoteStatus.PENDING.value,
            valid_until=utcnow() + timedelta(days=QUOTE_VALID_DAYS),
            requested_by=requested_by,
        )
        commit_numbered(self.db, quote, "quote_number", Quote.quote_number, "QT")
        self.db.refresh(quote)
        return quote

    def update(self, quote_id: int, data: QuoteUpdate) -> Quote:
        quote = self.get(quote_id)
        if quote.status != QuoteStatus.PENDING.value:
            raise HTTPException(status_code=409, detail="Only pending quotes can be edited")
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(quote, key, value)
        quote.base_cost, quote.delivery_fee, quote.total_cost = price_quote(
            float(quote.weight), quote.delivery_time_slot
        )
        self.db.commit()
        self.db.refresh(quote)
        return quote

    def set_status(self, quote_id: int, status: str) -> Quote:
        quote = self.get(quote_id)
        if quote.status == QuoteStatus.CONVERTED.value:
            raise HTTPException(status_code=409, detail="Quote already converted to an invoice")
        if status == QuoteStatus.CONVERTED.value:
            raise HTTPException(status_code=409, detail="Use convert-to-invoice to convert a quote")
        if status == QuoteStatus.APPROVED.value and quote.is_expired:
            raise HTTPException(status_code=409, detail="Quote has expired")
        quote.status = status
        self.db.commit()
        self.db.refresh(quote)
        return quote

    def convert_to_invoice(self, quote_id: int) -> Invoice:
        quote = self.get(quote_id)
        if quote.status != QuoteStatus.APPROVED.value:
            raise HTTPException(status_code=409, detail="Only approved quotes can be invoiced")
        invoice = Invoice(
            quote_id=quote.id,
            customer_name=quote.sender_name,
            customer_email=quote.sender_email,
            description=f"Shipping quote {quote.quote_number}: {quote.description or 'package delivery'}",
            amount=quote.total_cost,
            payment_status="pending",
            due_date=utcnow() + timedelta(days=INVOICE_DUE_DAYS),
        )

        def mark_converted():
            quote.status = QuoteStatus.CONVERTED.value

        commit_numbered(self.db, invoice, "invoice_number", Invoice.invoice_number, "INV", stage=mark_converted)
        self.db.refresh(invoice)
        return invoice
