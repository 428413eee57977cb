from fastapi import BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional
from app.auth_local import decode_access_token
from app.application.events import PackageEvents
from app.application.notifications import NotificationService
from app.domain.models import User
from app.infrastructure.cache import ResponseCache
from app.infrastructure.db import get_db
from app.infrastructure.realtime import ConnectionRegistry
from shared.core import set_request_context

BEARER_PREFIX = "Bearer "

def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):].strip()

def _user_from_token(token: str, db: Session) -> User:
    token_data = decode_access_token(token)
    if not token_data or not token_data.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db.get(User, token_data["sub"])
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    set_request_context(user_id=user.id)
    return user

def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing token")
    return _user_from_token(token, db)

def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    token = _bearer_token(request)
    return _user_from_token(token, db) if token else None

def require_admin(user: User = Depends(get_current_user)) -> User:
    # Role is read from the database on every call, never trusted from the token
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user

def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.connections

def get_notifier(request: Request) -> NotificationService:
    return request.app.state.notifier

def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache

def get_package_events(
    background_tasks: BackgroundTasks,
    notifier: NotificationService = Depends(get_notifier),
    registry: ConnectionRegistry = Depends(get_registry),
    cache: ResponseCache = Depends(get_cache),
) -> PackageEvents:
    return PackageEvents(background_tasks, notifier, registry, cache)
