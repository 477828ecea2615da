"""Configuration for the train ticket estimator."""

from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings."""

    # API Settings
    API_TITLE = "Train Ticket Estimator"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = (
        "Train ticket price estimation with age, purchase timing and discount card rules"
    )

    # Base fare lookup
    PRICE_API_URL = os.getenv("PRICE_API_URL", "https://sncf.com/api/train/estimate/price")
    PRICE_API_TIMEOUT = float(os.getenv("PRICE_API_TIMEOUT", "10.0"))
    PRICE_LOOKUP_BACKEND = os.getenv("PRICE_LOOKUP_BACKEND", "api")

    # Database Settings
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./train_estimator_fares.db")

    # Cache Settings
    REDIS_URL: Optional[str] = os.getenv("REDIS_URL") or None
    FARE_CACHE_ENABLED = _as_bool(os.getenv("FARE_CACHE_ENABLED", "false"))
    FARE_CACHE_TTL = int(os.getenv("FARE_CACHE_TTL", "3600"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]


settings = Settings()
