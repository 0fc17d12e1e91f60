"""
Signature Studio - Configuration Management

Centralized configuration for environment variables, CORS, and deployment settings.
This module ensures:
- No hardcoded secrets
- No missing required variables in production
- Environment-specific settings (dev/staging/prod)
- Secure defaults
"""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses pydantic-settings for validation and type coercion.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ==================== ENVIRONMENT ====================
    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment: development, staging, production"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (auto-enabled in development)"
    )

    # ==================== DATABASE ====================
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./signatures.db",
        description="Async SQLAlchemy URL for saved signatures"
    )

    # ==================== AUTHENTICATION ====================
    JWT_SECRET_KEY: str = Field(
        default="",
        description="Secret key for verifying JWT bearer tokens (required in production)"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    INTERNAL_API_KEY: str = Field(
        default="",
        description="API key for service callers such as the asset host (X-Internal-Api-Key)"
    )
    INTERNAL_API_KEYS: str = Field(
        default="",
        description="Comma-separated additional internal API keys, for key rotation"
    )

    # ==================== CORS ====================
    CORS_ORIGINS: str = Field(
        default="",
        description="Comma-separated list of allowed origins"
    )

    # ==================== IMAGE STORAGE ====================
    S3_ENDPOINT: str = Field(
        default="",
        description="S3-compatible endpoint (empty for AWS, e.g. https://minio.example.com)"
    )
    S3_ACCESS_KEY: str = Field(default="")
    S3_SECRET_KEY: str = Field(default="")
    S3_BUCKET: str = Field(default="")
    S3_REGION: str = Field(default="us-east-1")
    S3_PUBLIC_BASE: str = Field(
        default="",
        description="Public base URL for the bucket, e.g. https://cdn.example.com/bucket"
    )
    AVATARS_PREFIX: str = Field(
        default="avatars",
        description="Key prefix for signed-in users' avatars"
    )

    # ==================== ICONS ====================
    ICON_ASSET_BASE: str = Field(
        default="",
        description="Asset host base URL; icons are probed at {base}/{bucket}/{name}.png"
    )
    ICONS_BUCKET: str = Field(
        default="icons",
        description="Preferred icon bucket (the singular/plural spelling is tried next)"
    )
    ICON_PROBE_TIMEOUT: float = Field(
        default=5.0,
        description="Per-request timeout in seconds when probing icons"
    )
    ICON_RESOLUTION_ENABLED: bool = Field(
        default=True,
        description="Probe the asset host for icons on startup"
    )

    # ==================== OBSERVABILITY ====================
    SENTRY_DSN: str = Field(
        default="",
        description="Sentry DSN for error tracking"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR"
    )

    # ==================== API ====================
    API_TITLE: str = Field(
        default="Signature Studio API",
        description="API title for OpenAPI docs"
    )
    API_VERSION: str = Field(
        default="1.0.0",
        description="API version"
    )

    # ==================== COMPUTED PROPERTIES ====================

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_staging(self) -> bool:
        return self.ENVIRONMENT.lower() == "staging"

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS_ORIGINS into a list with environment-aware defaults.

        Production/Staging: Only specified origins
        Development: Include localhost origins
        """
        if self.CORS_ORIGINS and self.CORS_ORIGINS != "*":
            origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        else:
            origins = []

        dev_origins = [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:8000",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]

        all_origins = set(origins)
        if not self.is_production:
            all_origins.update(dev_origins)

        return sorted(all_origins)

    @property
    def debug_enabled(self) -> bool:
        """Enable debug in development or when explicitly set"""
        return self.DEBUG or self.is_development

    @property
    def internal_api_keys(self) -> List[str]:
        keys = [self.INTERNAL_API_KEY] + self.INTERNAL_API_KEYS.split(",")
        return [k.strip() for k in keys if k.strip()]

    @property
    def storage_configured(self) -> bool:
        return bool(self.S3_BUCKET and self.S3_PUBLIC_BASE)

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration for production deployment.
        Returns list of validation errors.
        """
        errors = []

        if not self.is_production:
            return errors

        if not self.JWT_SECRET_KEY:
            errors.append("JWT_SECRET_KEY is required")
        elif len(self.JWT_SECRET_KEY) < 32:
            errors.append("JWT_SECRET_KEY should be at least 32 characters")

        if self.CORS_ORIGINS == "*":
            errors.append("CORS_ORIGINS cannot be '*' in production")

        if self.DATABASE_URL.startswith("sqlite"):
            errors.append("DATABASE_URL cannot be SQLite in production")

        if not self.storage_configured:
            errors.append("S3_BUCKET and S3_PUBLIC_BASE are required in production")

        if self.DEBUG:
            errors.append("DEBUG should be False in production")

        return errors


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Settings are loaded once and cached for the application lifetime.
    """
    settings = Settings()

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.debug_enabled}")
    logger.info(f"CORS Origins: {len(settings.cors_origins_list)} configured")

    if settings.is_production:
        errors = settings.validate_production_config()
        if errors:
            for error in errors:
                logger.error(f"Configuration error: {error}")
            raise ValueError(f"Production configuration invalid: {', '.join(errors)}")

    return settings


# ==================== CORS CONFIGURATION ====================

def get_cors_config() -> dict:
    """
    Get CORS middleware configuration.

    Returns configuration dict for CORSMiddleware.
    """
    settings = get_settings()

    return {
        "allow_origins": settings.cors_origins_list,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": [
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "X-Requested-With",
            "X-Request-ID",
            "X-Internal-Api-Key",
        ],
        "expose_headers": ["X-Request-ID"],
        "max_age": 600,  # Cache preflight for 10 minutes
    }


# ==================== ENVIRONMENT VALIDATION ====================

def validate_environment() -> dict:
    """
    Validate environment variables.

    Returns a status dict with validation results.
    """
    settings = get_settings()

    status = {
        "valid": True,
        "environment": settings.ENVIRONMENT,
        "errors": [],
        "warnings": [],
        "variables": {}
    }

    required_vars = [
        ("JWT_SECRET_KEY", settings.JWT_SECRET_KEY),
    ]

    for name, value in required_vars:
        if not value:
            status["errors"].append(f"{name} is not set")
            status["valid"] = False
        else:
            status["variables"][name] = "✓ Set"

    optional_vars = [
        ("S3_BUCKET", settings.S3_BUCKET, "Image uploads disabled"),
        ("S3_PUBLIC_BASE", settings.S3_PUBLIC_BASE, "Image uploads disabled"),
        ("ICON_ASSET_BASE", settings.ICON_ASSET_BASE, "Using fallback icon URLs"),
        ("INTERNAL_API_KEY", settings.INTERNAL_API_KEY, "Icon overrides disabled"),
        ("SENTRY_DSN", settings.SENTRY_DSN, "Error tracking disabled"),
    ]

    for name, value, warning in optional_vars:
        if not value:
            status["warnings"].append(warning)
            status["variables"][name] = "⚠ Not set"
        else:
            status["variables"][name] = "✓ Set"

    errors = settings.validate_production_config()
    if errors:
        status["errors"].extend(errors)
        status["valid"] = False

    return status
