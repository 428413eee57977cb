from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.infrastructure.db import get_db
from app.application.quote_service import QuoteService
from app.application.schemas import InvoiceRead, QuoteCreate, QuoteRead, QuoteStatusUpdate, QuoteUpdate
from app.domain.enums import QuoteStatus
from app.domain.models import User
from .deps import get_optional_user, require_admin

router = APIRouter(prefix="/api/quotes", tags=["quotes"])

@router.post("", response_model=QuoteRead, status_code=201)
def request_quote(
    payload: QuoteCreate,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """Price a shipment. Open to anonymous visitors; signed-in users are linked to the quote."""
    return QuoteService(db).create(payload, requested_by=user.id if user else None)

@router.get("", response_model=list[QuoteRead])
def list_quotes(
    status: Optional[QuoteStatus] = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return QuoteService(db).list(status=status.value if status else None)

@router.get("/{quote_id}", response_model=QuoteRead)
def get_quote(quote_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return QuoteService(db).get(quote_id)

@router.patch("/{quote_id}", response_model=QuoteRead)
def update_quote(
    quote_id: int,
    payload: QuoteUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return QuoteService(db).update(quote_id, payload)

@router.patch("/{quote_id}/status", response_model=QuoteRead)
def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return QuoteService(db).set_status(quote_id, payload.status)

@router.post("/{quote_id}/convert-to-invoice", response_model=InvoiceRead, status_code=201)
def convert_quote(quote_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return QuoteService(db).convert_to_invoice(quote_id)
