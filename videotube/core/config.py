"""
Configuration management using Pydantic Settings.
All environment variables are loaded and validated here.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ================================
    # Application Configuration
    # ================================
    APP_NAME: str = "VideoTube"
    APP_VERSION: str = "0.1.0"
    APP_ENV: Literal["development", "staging", "production", "test"] = "development"
    DEBUG: bool = True

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into list."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    # Every request is cancelled after this many seconds (504 to the client)
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    # ================================
    # Database Configuration
    # ================================
    DATABASE_URL: str = Field(..., description="Async SQLAlchemy connection string")
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_COMMAND_TIMEOUT_SECONDS: float = 30.0

    # ================================
    # JWT Authentication
    # ================================
    # Access tokens are short-lived and travel on every request.
    # Refresh tokens are long-lived, signed with their own secret and
    # persisted on the user row so they can be revoked by logout.
    JWT_SECRET_KEY: str = Field(..., min_length=32)
    REFRESH_TOKEN_SECRET_KEY: str = Field(..., min_length=32)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 10

    # Cookies carrying the tokens are always httponly; secure only behind TLS
    COOKIE_SECURE: bool = False

    # bcrypt cost factor (tests lower this to keep hashing fast)
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # ================================
    # Media Storage (Cloudinary)
    # ================================
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    MEDIA_UPLOAD_TIMEOUT_SECONDS: float = 120.0

    # Multipart uploads are staged here before being forwarded
    UPLOAD_TEMP_DIR: str = "./public/temp"

    # ================================
    # Pagination
    # ================================
    PAGE_SIZE_DEFAULT: int = Field(default=10, ge=1)
    PAGE_SIZE_MAX: int = Field(default=100, ge=1)

    # ================================
    # Logging
    # ================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running under the test suite."""
        return self.APP_ENV == "test"

    @property
    def media_configured(self) -> bool:
        """True when all Cloudinary credentials are present."""
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance (read once from the environment)."""
    return Settings()

