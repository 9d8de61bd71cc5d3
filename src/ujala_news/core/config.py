"""
Settings for the Ujala news backend.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UjalaSettings(BaseSettings):
    """
    Process-wide settings, read from the environment and `.env`.

    Branding defaults (author, category, source) live here rather than on the
    entities so a deployment can change them without a code change.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # --- Basic Environment ---
    DEBUG: bool = True
    SECRET_KEY: str = ""
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # --- Pagination & API Limits ---
    DEFAULT_LIST_PER_PAGE: int = 20
    MAX_API_LIMIT: int = 100
    MIN_LIST_PER_PAGE: int = 1

    # --- Tokens ---
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Superadmin (configured credential pair, never stored) ---
    SUPERADMIN_EMAIL: str | None = None
    SUPERADMIN_PASSWORD: str | None = None

    # --- Database ---
    DATABASE_URL: str = "sqlite+aiosqlite:///ujala.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # --- Live news feed (GNews) ---
    NEWS_API_KEY: str | None = None
    NEWS_API_BASE_URL: str = "https://gnews.io/api/v4"
    NEWS_API_LANG: str = "hi"
    NEWS_API_COUNTRY: str = "in"
    NEWS_API_TIMEOUT: float = 10.0
    NEWS_CACHE_TTL: int = 300
    NEWS_CACHE_MAX_ENTRIES: int = 256
    NEWS_CACHE_MAX_ARTICLES: int = 2000

    # --- Media ---
    MEDIA_ROOT: str = "public"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # --- Public URLs ---
    SERVER_URL: str | None = None
    FRONTEND_URL: str | None = None

    # --- Branding defaults ---
    UJALA_CATEGORY: str = "Moradabad ujala"
    ADMIN_CATEGORY: str = "ujala"
    DEFAULT_AUTHOR: str = "Moradabad Ujala"
    ADMIN_AUTHOR: str = "Moradabad Ujala Team"
    REPORTER_AUTHOR: str = "Reporter"
    DEFAULT_SOURCE: str = "Moradabad Ujala"
    DEFAULT_IMAGE_URL: str = "https://via.placeholder.com/800x450?text=News+Image"
    # None keeps category free text; a list turns it into an enumeration.
    CATEGORY_CHOICES: list[str] | None = None

    # --- Accounts ---
    REPORTER_CODE_MAX_ATTEMPTS: int = 5

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # --- Feature Flags ---
    ENABLE_REQUEST_ID: bool = True
    ENABLE_TIMING_METRICS: bool = True
    ENABLE_CORS: bool = True
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://moradabadujala.in",
        "https://moradabadujala.in",
    ]

    @model_validator(mode="after")
    def validate_security(self) -> "UjalaSettings":
        """Ensures production doesn't ship without a secret key."""
        if not self.DEBUG and not self.SECRET_KEY:
            raise ValueError("SECRET_KEY is mandatory in production mode.")
        return self

    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT == "development"

    @property
    def superadmin_configured(self) -> bool:
        return bool(self.SUPERADMIN_EMAIL and self.SUPERADMIN_PASSWORD)


# Singleton instance for core use
settings = UjalaSettings()
