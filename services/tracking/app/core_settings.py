from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "shipnix"
    POSTGRES_USER: str = "shipnix"
    POSTGRES_PASSWORD: str = "shipnix"
    # Full URL wins over the POSTGRES_* parts (sqlite:// is accepted for local runs)
    DATABASE_URL: Optional[str] = None
    RUN_MIGRATIONS: bool = False

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRES_MINUTES: int = 60

    TRACKING_PREFIX: str = "ST-"
    TRACKING_SUFFIX_LENGTH: int = 9
    PUBLIC_BASE_URL: str = "http://localhost:5000"

    REDIS_URL: Optional[str] = None
    TRACKING_CACHE_TTL: int = 30

    EMAIL_WEBHOOK_URL: Optional[str] = None
    SMS_WEBHOOK_URL: Optional[str] = None
    NOTIFICATION_EMAIL_DELAY_MS: int = 500
    NOTIFICATION_SMS_DELAY_MS: int = 300
    NOTIFICATION_TIMEOUT_SECONDS: float = 5.0

    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
