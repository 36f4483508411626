"""
Tests for startup environment validation.
"""

import pytest

from videotube.core.config import Settings
from videotube.core.env_validation import (
    EnvironmentValidationError,
    validate_database_url,
    validate_environment,
    validate_media_settings,
    validate_or_raise,
    validate_production_settings,
    validate_secret_key,
    validate_token_secrets,
)

PRODUCTION = {
    "APP_ENV": "production",
    "DEBUG": False,
    "COOKIE_SECURE": True,
    "DATABASE_URL": "postgresql+asyncpg://videotube:pw@db:5432/videotube",
    "LOG_FORMAT": "json",
    "ALLOWED_ORIGINS": "https://videotube.app",
}


def build_settings(**overrides) -> Settings:
    return Settings(**overrides)


# ================================
# Secrets
# ================================

class TestSecrets:

    def test_test_suite_secrets_are_valid(self, settings):
        assert validate_token_secrets(settings) == []

    def test_missing_secret(self):
        assert validate_secret_key("JWT_SECRET_KEY", "") == ["JWT_SECRET_KEY is not set"]

    def test_short_secret(self):
        errors = validate_secret_key("JWT_SECRET_KEY", "tiny")

        assert errors == ["JWT_SECRET_KEY is too short (must be at least 32 characters)"]

    def test_placeholder_secret(self):
        errors = validate_secret_key("JWT_SECRET_KEY", "change-this-before-deploying-0123456789")

        assert len(errors) == 1
        assert "placeholder" in errors[0]

    def test_identical_secrets(self, settings):
        same = build_settings(REFRESH_TOKEN_SECRET_KEY=settings.JWT_SECRET_KEY)

        errors = validate_token_secrets(same)

        assert errors == ["REFRESH_TOKEN_SECRET_KEY should be different from JWT_SECRET_KEY for security"]


# ================================
# Database & Media
# ================================

class TestDatabaseUrl:

    def test_async_drivers_accepted(self, settings):
        assert validate_database_url(settings) == []
        assert validate_database_url(build_settings(DATABASE_URL=PRODUCTION["DATABASE_URL"])) == []

    def test_sync_driver_rejected(self):
        errors = validate_database_url(build_settings(DATABASE_URL="postgresql://u:p@db/videotube"))

        assert len(errors) == 1
        assert "async driver" in errors[0]

    def test_sqlite_rejected_in_production(self):
        errors = validate_database_url(build_settings(**{**PRODUCTION, "DATABASE_URL": "sqlite+aiosqlite:///prod.db"}))

        assert errors == ["DATABASE_URL must point at PostgreSQL in production"]


class TestMediaSettings:

    def test_missing_credentials_tolerated_outside_production(self):
        assert validate_media_settings(build_settings(CLOUDINARY_API_SECRET="")) == []

    def test_missing_credentials_rejected_in_production(self):
        errors = validate_media_settings(build_settings(**PRODUCTION, CLOUDINARY_API_SECRET=""))

        assert len(errors) == 1
        assert "CLOUDINARY" in errors[0]


# ================================
# Production Rules
# ================================

class TestProduction:

    def test_valid_production_configuration(self):
        settings = build_settings(**PRODUCTION)

        assert validate_environment(settings) == (True, [])
        validate_or_raise(settings)

    def test_debug_and_insecure_cookies_rejected(self):
        settings = build_settings(**{**PRODUCTION, "DEBUG": True, "COOKIE_SECURE": False})

        assert validate_production_settings(settings) == [
            "DEBUG must be false in production",
            "COOKIE_SECURE must be true in production",
        ]

    def test_invalid_production_aborts_startup(self):
        settings = build_settings(**{**PRODUCTION, "DATABASE_URL": "postgresql://u:p@db/videotube"})

        with pytest.raises(EnvironmentValidationError) as exc_info:
            validate_or_raise(settings)

        assert any("async driver" in error for error in exc_info.value.errors)

    def test_invalid_development_only_warns(self):
        settings = build_settings(APP_ENV="development", DATABASE_URL="postgresql://u:p@db/videotube")

        is_valid, errors = validate_environment(settings)
        assert is_valid is False
        assert errors

        validate_or_raise(settings)
