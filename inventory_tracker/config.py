from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Parts Inventory Tracker"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security
    # ==============================
    ADMIN_API_KEY: Optional[str] = None
    API_KEYS: Optional[str] = None
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None
    JWT_REQUIRED: bool = False

    # ==============================
    # Parts
    # ==============================
    DEFAULT_UNIT: str = "pcs"
    DEFAULT_LOW_STOCK_THRESHOLD: int = 10

    # ==============================
    # Stock movements
    # ==============================
    STOCK_CAS_MAX_ATTEMPTS: int = 5
    DEFAULT_SALE_NOTE: str = "Sale"
    DEFAULT_RESTOCK_NOTE: str = "Restock"

    # ==============================
    # Dashboard
    # ==============================
    DASHBOARD_LATEST_LIMIT: int = 5


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
