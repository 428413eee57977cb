import time
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from app.core_settings import get_settings
from app.domain.models import Base
from shared.core import get_logger

logger = get_logger(__name__)

settings = get_settings()
DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("sqlite"):
    # Single shared connection so an in-memory database survives across sessions
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(DATABASE_URL, echo=False, future=True, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_models():
    Base.metadata.create_all(engine)

def wait_for_database(max_attempts: int = 30, retry_delay: float = 2.0) -> int:
    """Block until the database answers ``SELECT 1``; returns the attempt count."""
    for attempt in range(1, max_attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return attempt
        except OperationalError as e:
            if attempt == max_attempts:
                logger.error(f"Database not ready after {max_attempts} attempts: {e}")
                raise
            wait_time = min(retry_delay * attempt, 30)
            logger.warning(f"Database not ready: {e}. Retrying in {wait_time}s")
            time.sleep(wait_time)
    return max_attempts
