"""
Environment variable validation and security checks.

Validates configuration before the application starts serving requests.
In production any error aborts startup; elsewhere errors are logged as
warnings so local development keeps working with relaxed settings.
"""

from typing import List, Optional, Tuple

from videotube.core.config import Settings
from videotube.core.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_MARKERS = ("change", "your-", "example", "secret-key")
ASYNC_DRIVERS = ("postgresql+asyncpg://", "sqlite+aiosqlite://")


class EnvironmentValidationError(Exception):
    """Raised when environment validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def validate_secret_key(key_name: str, key_value: Optional[str], min_length: int = 32) -> List[str]:
    """
    Validate that a secret key meets security requirements.

    Args:
        key_name: Name of the key (for error messages)
        key_value: The key value to validate
        min_length: Minimum required length

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not key_value:
        errors.append(f"{key_name} is not set")
        return errors

    if len(key_value) < min_length:
        errors.append(
            f"{key_name} is too short (must be at least {min_length} characters)"
        )

    lowered = key_value.lower()
    if any(marker in lowered for marker in PLACEHOLDER_MARKERS):
        errors.append(
            f"{key_name} appears to be a placeholder value - update with a real secret key"
        )

    return errors


def validate_token_secrets(settings: Settings) -> List[str]:
    """Both JWT secrets must be valid and must differ from each other."""
    errors = []
    errors.extend(validate_secret_key("JWT_SECRET_KEY", settings.JWT_SECRET_KEY))
    errors.extend(validate_secret_key("REFRESH_TOKEN_SECRET_KEY", settings.REFRESH_TOKEN_SECRET_KEY))

    if settings.JWT_SECRET_KEY and settings.JWT_SECRET_KEY == settings.REFRESH_TOKEN_SECRET_KEY:
        errors.append(
            "REFRESH_TOKEN_SECRET_KEY should be different from JWT_SECRET_KEY for security"
        )

    return errors


def validate_database_url(settings: Settings) -> List[str]:
    """
    Validate database URL configuration.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")
        return errors

    if not settings.DATABASE_URL.startswith(ASYNC_DRIVERS):
        errors.append(
            "DATABASE_URL must use an async driver (postgresql+asyncpg://... or sqlite+aiosqlite://...)"
        )

    if settings.is_production and settings.DATABASE_URL.startswith("sqlite"):
        errors.append("DATABASE_URL must point at PostgreSQL in production")

    return errors


def validate_media_settings(settings: Settings) -> List[str]:
    """Media credentials are mandatory in production, optional elsewhere."""
    errors = []

    if settings.media_configured:
        return errors

    if settings.is_production:
        errors.append(
            "CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be set in production"
        )
    else:
        logger.warning(
            "environment_validation_warning",
            message="Cloudinary credentials not set - file uploads will fail",
        )

    return errors


def validate_production_settings(settings: Settings) -> List[str]:
    """
    Validate production-specific settings.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not settings.is_production:
        return errors

    if settings.DEBUG:
        errors.append("DEBUG must be false in production")

    if not settings.COOKIE_SECURE:
        errors.append("COOKIE_SECURE must be true in production")

    if any("localhost" in origin for origin in settings.ALLOWED_ORIGINS):
        logger.warning(
            "localhost_in_allowed_origins",
            message="ALLOWED_ORIGINS includes localhost in production - may be insecure",
        )

    if settings.LOG_FORMAT != "json":
        logger.warning(
            "log_format_not_json",
            message="LOG_FORMAT should be 'json' in production for better log aggregation",
        )

    return errors


def validate_environment(settings: Settings) -> Tuple[bool, List[str]]:
    """
    Validate all environment variables.

    Returns:
        (is_valid, list_of_errors)
    """
    logger.info(
        "validating_environment",
        app_env=settings.APP_ENV,
        app_name=settings.APP_NAME,
    )

    all_errors: List[str] = []
    all_errors.extend(validate_token_secrets(settings))
    all_errors.extend(validate_database_url(settings))
    all_errors.extend(validate_media_settings(settings))
    all_errors.extend(validate_production_settings(settings))

    if all_errors:
        logger.error(
            "environment_validation_failed",
            errors=all_errors,
            error_count=len(all_errors),
        )
        return False, all_errors

    logger.info(
        "environment_validation_successful",
        app_env=settings.APP_ENV,
        media_configured=settings.media_configured,
    )
    return True, []


def validate_or_raise(settings: Settings) -> None:
    """
    Validate the environment during application startup.

    Raises:
        EnvironmentValidationError: in production when any check fails
    """
    is_valid, errors = validate_environment(settings)

    if is_valid:
        return

    if settings.is_production:
        logger.critical("startup_aborted_invalid_environment", errors=errors)
        raise EnvironmentValidationError(errors)

    logger.warning(
        "environment_validation_ignored",
        environment=settings.APP_ENV,
        error_count=len(errors),
    )
