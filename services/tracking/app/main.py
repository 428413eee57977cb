"""
Shipnix-Express tracking service
Package lifecycle, public tracking, quotes, invoices and support over REST and WebSocket
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
import os
import subprocess

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from app.core_settings import get_settings
from app.api.routes import router as packages_router
from app.api.public import router as public_router
from app.api.auth import router as auth_router
from app.api.users import router as users_router
from app.api.admin import router as admin_router
from app.api.quotes import router as quotes_router
from app.api.invoices import router as invoices_router
from app.api.support import router as support_router
from app.api.realtime import router as realtime_router
from app.application.notifications import build_notification_service
from app.infrastructure.cache import ResponseCache
from app.infrastructure.db import SessionLocal, engine, init_models, wait_for_database
from app.infrastructure.realtime import ConnectionRegistry

settings = get_settings()

SERVICE_NAME = "shipnix-tracking"
SERVICE_VERSION = settings.SERVICE_VERSION
SERVICE_DESCRIPTION = "Shipnix-Express package tracking service"

setup_logging(
    service_name=SERVICE_NAME,
    level=settings.LOG_LEVEL,
    environment=settings.ENVIRONMENT,
    version=SERVICE_VERSION,
)

logger = get_logger(__name__)

def run_migrations() -> None:
    logger.info("Running database migrations")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=os.path.join(os.path.dirname(__file__), ".."),
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
    else:
        logger.info("Database migrations completed")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME} version {SERVICE_VERSION}")

    if not settings.database_url.startswith("sqlite"):
        attempts = wait_for_database()
        logger.info(f"Database ready after {attempts} attempt(s)")
    if settings.RUN_MIGRATIONS:
        run_migrations()
    init_models()
    logger.info("Database models initialized")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")

app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.state.connections = ConnectionRegistry()
app.state.notifier = build_notification_service(settings, SessionLocal)
app.state.cache = ResponseCache(settings.REDIS_URL, ttl=settings.TRACKING_CACHE_TTL)

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(
        f"Validation failed: {request.method} {request.url.path}",
        extra={'extra_fields': {'errors': len(exc.errors())}},
    )
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )

health_service = ServiceHealth(
    SERVICE_NAME,
    SERVICE_VERSION,
    engine=engine,
    redis_url=settings.REDIS_URL,
    required_config={"JWT_SECRET": settings.JWT_SECRET, "PUBLIC_BASE_URL": settings.PUBLIC_BASE_URL},
)
app.include_router(health_service.create_health_router())

app.include_router(auth_router)
app.include_router(packages_router)
app.include_router(public_router)
app.include_router(users_router)
app.include_router(admin_router)
app.include_router(quotes_router)
app.include_router(invoices_router)
app.include_router(support_router)
app.include_router(realtime_router)

@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs",
    }

@app.get("/info")
async def info():
    """Service information endpoint"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "health": "/health",
            "ready": "/health/ready",
            "live": "/health/live",
            "metrics": "/metrics",
            "docs": "/api/docs",
            "websocket": "/ws",
        },
    }

def custom_openapi():
    from fastapi.openapi.utils import get_openapi
    if app.openapi_schema:
        return app.openapi_schema
    schema_data = get_openapi(
        title=app.title,
        version=SERVICE_VERSION,
        description=SERVICE_DESCRIPTION,
        routes=app.routes,
    )
    schema_data.setdefault("components", {}).setdefault("securitySchemes", {})["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    schema_data["security"] = [{"BearerAuth": []}]
    app.openapi_schema = schema_data
    return app.openapi_schema

app.openapi = custom_openapi  # type: ignore
