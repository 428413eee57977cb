from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth_local import create_access_token
from app.infrastructure.db import get_db
from app.application.user_service import UserService
from app.application.schemas import RegisterRequest, TokenRequest, TokenResponse, UserRead
from app.domain.models import User
from .deps import get_current_user
from shared.core import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])

@router.post("/auth/register", response_model=UserRead, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = UserService(db).register(payload)
    logger.info(f"Registered user {user.id}")
    return user

@router.post("/auth/token", response_model=TokenResponse)
def issue_token(payload: TokenRequest, db: Session = Depends(get_db)):
    user = UserService(db).authenticate(payload.username, payload.password)
    return TokenResponse(access_token=create_access_token(user.id, role=user.role))

@router.get("/api/auth/user", response_model=UserRead)
def current_user(user: User = Depends(get_current_user)):
    return user
