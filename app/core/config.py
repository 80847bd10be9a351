from functools import lru_cache
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SQUARE_URLS = {
    "production": "https://connect.squareup.com/v2",
    "sandbox": "https://connect.squareupsandbox.com/v2",
}


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.missing = missing or []


class Settings(BaseSettings):
    # APP
    APP_NAME: str = "Restaurant Pulse API"
    ENV: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: Optional[str] = None

    # Square
    SQUARE_ACCESS_TOKEN: Optional[str] = None
    SQUARE_LOCATION_ID: Optional[str] = None
    SQUARE_ENVIRONMENT: str = "sandbox"
    SQUARE_API_VERSION: str = "2023-10-18"
    SQUARE_TIMEOUT_SECONDS: float = 30.0

    # Reports
    ORDERS_MAX_PAGES: int = 20
    ORDERS_PAGE_LIMIT: int = 500
    REPORT_TIMEZONE: str = "UTC"
    TOP_ITEMS_LIMIT: int = 10
    ATTRIBUTE_BY_PAYMENTS: bool = False

    # CORS (comma-separated string in .env)
    CORS_ORIGINS: Optional[str] = None

    @field_validator("SQUARE_ENVIRONMENT")
    @classmethod
    def _known_environment(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in SQUARE_URLS:
            raise ValueError("SQUARE_ENVIRONMENT must be sandbox|production")
        return v

    @field_validator("ORDERS_MAX_PAGES", "ORDERS_PAGE_LIMIT", "TOP_ITEMS_LIMIT")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        v = self.CORS_ORIGINS
        if not v:
            return []
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @property
    def square_base_url(self) -> str:
        return SQUARE_URLS[self.SQUARE_ENVIRONMENT]

    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore unknown keys in .env
    )


def require_square_credentials(cfg: Settings) -> tuple[str, str]:
    """Return (access_token, location_id) or raise ConfigError."""
    missing = [
        name
        for name, value in (
            ("SQUARE_ACCESS_TOKEN", cfg.SQUARE_ACCESS_TOKEN),
            ("SQUARE_LOCATION_ID", cfg.SQUARE_LOCATION_ID),
        )
        if not value
    ]
    if missing:
        raise ConfigError("Missing Square API credentials", missing)
    return cfg.SQUARE_ACCESS_TOKEN, cfg.SQUARE_LOCATION_ID


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
