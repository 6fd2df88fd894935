import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    Local development reads `backend/.env` for convenience. Under pytest or in
    CI the file is skipped so tests that validate missing secrets fail fast.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', or 'production'",
    )
    PROJECT_NAME: str = Field(
        default="CivicSync",
        description="Project name used in emails and the API title",
    )

    DATABASE_URL: str = "sqlite:///./data/civicsync.db"
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (JSON list in env var)",
    )
    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Frontend URL used for links in emails",
    )

    # Identity provider session tokens
    AUTH_JWT_KEY: str = Field(
        ...,
        description="Key used to verify session JWTs (shared secret or PEM public key)",
    )
    AUTH_JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Signing algorithm of session JWTs (HS256, RS256, ...)",
    )
    AUTH_JWT_ISSUER: str | None = Field(
        default=None,
        description="Expected 'iss' claim; not checked when unset",
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60,
        description="Lifetime of tokens minted locally (development and tests)",
    )
    IDENTITY_WEBHOOK_SECRET: str = Field(
        default="",
        description="Signing secret of identity webhooks ('whsec_' prefixed base64)",
    )

    # The single irrevocable super admin
    SUPER_ADMIN_EMAIL: str = Field(
        ...,
        description="Email of the super admin - must be set via SUPER_ADMIN_EMAIL",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )
    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    # Logging and performance
    LOG_DIR: str = Field(default="logs", description="Directory for rotating log files")
    LOG_TO_FILE: bool = Field(default=True, description="Write logs to LOG_DIR")
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Complaint rules
    LONG_PENDING_DAYS: int = Field(
        default=7,
        description="Age in days after which an unresolved complaint is long-pending",
    )
    FAKE_FLAG_WINDOW_HOURS: int = Field(
        default=24,
        description="Hours after submission during which admins may flag a complaint fake",
    )
    COMPLAINTS_PAGE_SIZE: int = Field(
        default=10,
        description="Default number of complaints per page",
    )

    # Image host (Cloudinary)
    IMAGE_HOST_CLOUD_NAME: str = Field(default="", description="Image host cloud name")
    IMAGE_HOST_API_KEY: str = Field(default="", description="Image host API key")
    IMAGE_HOST_API_SECRET: str = Field(default="", description="Image host API secret")
    IMAGE_HOST_FOLDER: str = Field(
        default="civicsync",
        description="Folder uploaded images are stored under",
    )
    UPLOAD_MAX_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted image size in bytes",
    )
    UPLOAD_ALLOWED_TYPES: List[str] = Field(
        default=["image/jpeg", "image/jpg", "image/png", "image/gif"],
        description="Accepted image content types (JSON list in env var)",
    )

    # Map provider (public key only)
    MAP_PROVIDER: str = Field(default="google", description="Map provider name")
    MAP_API_KEY: str = Field(default="", description="Public map API key")

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'smtp' or 'console'",
    )
    SMTP_HOST: str = Field(
        default="localhost",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port",
    )
    SMTP_USER: str = Field(
        default="",
        description="SMTP username",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        description="SMTP password",
    )
    SMTP_FROM_EMAIL: str = Field(
        default="noreply@civicsync.app",
        description="From email address",
    )
    SMTP_FROM_NAME: str = Field(
        default="CivicSync",
        description="From display name",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit SSL for SMTP connection (port 465)",
    )

    @property
    def image_host_configured(self) -> bool:
        return bool(
            self.IMAGE_HOST_CLOUD_NAME
            and self.IMAGE_HOST_API_KEY
            and self.IMAGE_HOST_API_SECRET
        )

    @field_validator("CORS_ORIGINS", "UPLOAD_ALLOWED_TYPES", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | List[str]) -> List[str]:
        """Parse list settings from comma-separated strings."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("SUPER_ADMIN_EMAIL", mode="after")
    @classmethod
    def normalize_super_admin_email(cls, v: str) -> str:
        return v.strip().lower()

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


# Raises pydantic.ValidationError at import time when a required secret is missing.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
