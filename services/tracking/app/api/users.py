from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.infrastructure.db import get_db
from app.application.service import PackageService
from app.application.support_service import SupportService
from app.application.user_service import UserService
from app.application.schemas import AddressCreate, AddressRead, NotificationRead, PackageRead, TicketRead
from app.domain.models import User
from .deps import get_current_user

router = APIRouter(prefix="/api/user", tags=["user"])

@router.get("/packages", response_model=list[PackageRead])
def my_packages(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Packages the caller sent, receives, or created."""
    return PackageService(db).for_user(user)

@router.get("/notifications", response_model=list[NotificationRead])
def my_notifications(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return UserService(db).notifications(user)

@router.get("/support-tickets", response_model=list[TicketRead])
def my_tickets(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return SupportService(db).list(user=user)

@router.get("/addresses", response_model=list[AddressRead])
def list_addresses(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return UserService(db).addresses(user)

@router.post("/addresses", response_model=AddressRead, status_code=201)
def add_address(payload: AddressCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return UserService(db).add_address(user, payload)

@router.delete("/addresses/{address_id}", status_code=204)
def delete_address(address_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    UserService(db).delete_address(user, address_id)
    return None
