from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.infrastructure.db import get_db
from app.application.analytics import collect_analytics
from app.application.support_service import SupportService
from app.application.user_service import UserService
from app.application.schemas import AnalyticsRead, TicketAssign, TicketRead, TicketStatusUpdate, UserRead
from app.domain.enums import TicketStatus
from app.domain.models import User
from .deps import require_admin

router = APIRouter(prefix="/api/admin", tags=["admin"])

@router.get("/users", response_model=list[UserRead])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return UserService(db).list()

@router.get("/analytics", response_model=AnalyticsRead)
def analytics(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return collect_analytics(db)

@router.get("/support-tickets", response_model=list[TicketRead])
def list_tickets(
    status: Optional[TicketStatus] = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return SupportService(db).list(status=status.value if status else None)

@router.patch("/support-tickets/{ticket_id}/assign", response_model=TicketRead)
def assign_ticket(
    ticket_id: int,
    payload: TicketAssign,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return SupportService(db).assign(ticket_id, admin, payload.assignee_id)

@router.patch("/support-tickets/{ticket_id}/status", response_model=TicketRead)
def update_ticket_status(
    ticket_id: int,
    payload: TicketStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return SupportService(db).set_status(ticket_id, payload.status)
