from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.core_settings import get_settings
from app.infrastructure.cache import ResponseCache, tracking_key
from app.infrastructure.db import get_db
from app.application.service import PackageService
from app.application.schemas import PublicTrackingView
from .deps import get_cache

router = APIRouter(prefix="/api/public", tags=["tracking"])

@router.get("/track/{tracking_id}", response_model=PublicTrackingView)
def track_package(tracking_id: str, db: Session = Depends(get_db), cache: ResponseCache = Depends(get_cache)):
    """Unauthenticated lookup by tracking code. Internal ids and contact details are left out."""
    tracking_id = tracking_id.strip().upper()
    if not tracking_id.startswith(get_settings().TRACKING_PREFIX):
        raise HTTPException(status_code=400, detail="Invalid tracking ID format")

    key = tracking_key(tracking_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    package = PackageService(db).get_by_tracking_id(tracking_id)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    view = PublicTrackingView.model_validate(package).model_dump(mode="json")
    cache.set(key, view)
    return view
