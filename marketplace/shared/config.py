# marketplace/shared/config.py
from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Central Configuration Registry.
    Strictly typed and validated via Pydantic.
    """

    # --- Application Meta ---
    APP_NAME: str = "marketplace"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    OTEL_SERVICE_NAME: str = "marketplace-api"
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    # --- Persistence ---
    DATABASE_URL: str = "sqlite:///./marketplace.db"
    # Flat-file JSON stores (message threads, announcements)
    DATA_DIR: str = "./data"

    # --- Security ---
    # Empty secret means every admin check fails closed.
    ADMIN_SESSION_SECRET: str = ""
    ADMIN_SESSION_TTL_SEC: int = 60 * 60 * 8
    RATE_LIMIT_WINDOW_SEC: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # --- Checkout pricing ---
    TAX_RATE: float = 0.18
    FREE_SHIPPING_THRESHOLD: float = 5000
    FLAT_SHIPPING_COST: float = 150

    # --- Catalog ---
    SLUG_MAX_ATTEMPTS: int = 3

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
