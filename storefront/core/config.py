# storefront/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Every key has a development default so the storefront boots with the
    local JSON fallback store and a SQLite database.

    Backends:
      - TABLE_STORE_BACKEND: "sql" stores gateway entities in DATABASE_URL,
        "json" stores them in JSON files under DATA_DIR.
      - API_BACKEND: "local" runs the gateway services in-process against
        the configured table store, "remote" calls the gateway over HTTP
        at GATEWAY_BASE_URL.

    Optional:
      - SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY: when both are set,
        uploaded files go to Supabase Storage instead of DATA_DIR/blobs.
      - SMTP_*: order confirmation e-mails are only sent when configured.
    """

    PROJECT_NAME: str = "Storefront"
    STORE_PREFIX: str = "/store"
    GATEWAY_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Persistence
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DATA_DIR: str = "./data"
    TABLE_STORE_BACKEND: Literal["sql", "json"] = "json"
    # first run of the JSON store starts with a couple of demo products
    SEED_SAMPLE_PRODUCTS: bool = True

    # Storefront -> gateway
    API_BACKEND: Literal["local", "remote"] = "local"
    GATEWAY_BASE_URL: str = "http://localhost:8000/api/"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Bearer tokens
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Session cookie (holds the shopping cart)
    SESSION_SECRET: str = "dev-session-secret-change-me"
    SESSION_IDLE_MINUTES: int = 30

    # Auth behaviour
    LEGACY_PLAINTEXT_MIGRATION: bool = True
    ALLOW_ADMIN_REGISTRATION: bool = False
    FALLBACK_EMAIL_DOMAIN: str = "storefront.local"

    # Blob storage
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "assets"

    # SMTP (order confirmation e-mails)
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM_EMAIL: str | None = None
    SMTP_FROM_NAME: str = "Storefront"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
