"""Asset Vista — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Supabase
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Storage
    STORAGE_BUCKET: str = "inventory_images"
    MAX_PHOTO_SIZE_BYTES: int = 5 * 1024 * 1024

    # Password policy
    MIN_PASSWORD_LENGTH: int = 6
    ADMIN_MIN_PASSWORD_LENGTH: int = 8

    # Browser session
    SESSION_COOKIE_NAME: str = "asset_vista_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_IDLE_TTL_SECONDS: int = 8 * 60 * 60

    # Demo accounts
    SEED_DEMO_ACCOUNTS: bool = False
    DEMO_ADMIN_EMAIL: str = "admin@gmail.com"
    DEMO_ADMIN_PASSWORD: str = "admin1234"
    DEMO_USER_EMAIL: str = "user@gmail.com"
    DEMO_USER_PASSWORD: str = "user1234"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
