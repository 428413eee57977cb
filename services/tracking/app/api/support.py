from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session
from app.infrastructure.db import get_db
from app.application.support_service import SupportService
from app.application.schemas import MessageCreate, MessageRead, TicketCreate, TicketRead
from app.domain.models import User
from app.infrastructure.realtime import ConnectionRegistry
from .deps import get_current_user, get_registry

router = APIRouter(prefix="/api/support-tickets", tags=["support"])

@router.post("", response_model=TicketRead, status_code=201)
def open_ticket(payload: TicketCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return SupportService(db).open_ticket(user, payload)

@router.get("/{ticket_id}", response_model=TicketRead)
def get_ticket(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return SupportService(db).get_for(ticket_id, user)

@router.get("/{ticket_id}/messages", response_model=list[MessageRead])
def list_messages(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return SupportService(db).get_for(ticket_id, user).messages

@router.post("/{ticket_id}/messages", response_model=MessageRead, status_code=201)
def post_message(
    ticket_id: int,
    payload: MessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    registry: ConnectionRegistry = Depends(get_registry),
):
    message = SupportService(db).post_message(ticket_id, user, payload.body)
    data = MessageRead.model_validate(message).model_dump(mode="json")
    background_tasks.add_task(registry.broadcast, "chatMessage", data)
    return message
