from sqlalchemy.orm import Session
from fastapi import HTTPException
from typing import Optional
from app.domain.enums import TicketStatus
from app.domain.models import Package, SupportMessage, SupportTicket, User, utcnow
from .schemas import TicketCreate

class SupportService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, status: Optional[str] = None, user: Optional[User] = None):
        query = self.db.query(SupportTicket)
        if status:
            query = query.filter(SupportTicket.status == status)
        if user is not None:
            query = query.filter(SupportTicket.user_id == user.id)
        return query.order_by(SupportTicket.updated_at.desc(), SupportTicket.id.desc()).all()

    def get(self, ticket_id: int) -> SupportTicket:
        ticket = self.db.get(SupportTicket, ticket_id)
        if not ticket:
            raise HTTPException(status_code=404, detail="Ticket not found")
        return ticket

    def get_for(self, ticket_id: int, user: User) -> SupportTicket:
        """Ticket visible to its owner and to staff only."""
        ticket = self.get(ticket_id)
        if ticket.user_id != user.id and not user.is_admin:
            raise HTTPException(status_code=403, detail="Not allowed to access this ticket")
        return ticket

    def open_ticket(self, user: User, data: TicketCreate) -> SupportTicket:
        if data.package_id is not None and self.db.get(Package, data.package_id) is None:
            raise HTTPException(status_code=404, detail="Package not found")
        ticket = SupportTicket(
            user_id=user.id,
            subject=data.subject,
            priority=data.priority,
            package_id=data.package_id,
            status=TicketStatus.OPEN.value,
        )
        ticket.messages.append(SupportMessage(sender_id=user.id, body=data.message, is_staff=user.is_admin))
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        return ticket

    def post_message(self, ticket_id: int, user: User, body: str) -> SupportMessage:
        ticket = self.get_for(ticket_id, user)
        if ticket.status == TicketStatus.CLOSED.value:
            raise HTTPException(status_code=409, detail="Ticket is closed")
        message = SupportMessage(sender_id=user.id, body=body, is_staff=user.is_admin)
        ticket.messages.append(message)
        ticket.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(message)
        return message

    def assign(self, ticket_id: int, admin: User, assignee_id: Optional[str] = None) -> SupportTicket:
        ticket = self.get(ticket_id)
        assignee_id = assignee_id or admin.id
        assignee = self.db.get(User, assignee_id)
        if not assignee or not assignee.is_admin:
            raise HTTPException(status_code=400, detail="Tickets can only be assigned to staff")
        ticket.assigned_to = assignee.id
        if ticket.status == TicketStatus.OPEN.value:
            ticket.status = TicketStatus.IN_PROGRESS.value
        self.db.commit()
        self.db.refresh(ticket)
        return ticket

    def set_status(self, ticket_id: int, status: str) -> SupportTicket:
        ticket = self.get(ticket_id)
        ticket.status = status
        self.db.commit()
        self.db.refresh(ticket)
        return ticket
