"""
NoteBridge Backend - Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the dependency providers, middleware and the app factory.
When:  Loaded once at module import time; validated before app starts.

The remote notes service endpoint and its credentials live here and nowhere
else. Services receive them through `NotesAPIClient.from_settings()`; no
module builds an upstream URL by hand.
"""

from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST
    override NOTES_API_BASE_URL, SESSION_SECRET_KEY and the storage settings.
    """

    # ── Remote notes service ──────────────────────────────────────────────
    # Base URL of the notes/folders API of record, e.g. http://notes.internal
    notes_api_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the remote notes service (no trailing /api/v1)",
    )

    # Sent as `Authorization: Bearer <token>` when set
    notes_api_token: str = Field(default="", description="Bearer token for the notes service")

    # None means no timeout: a hung upstream blocks the request until it answers
    upstream_timeout: Optional[float] = Field(default=None, gt=0)

    # empty_list: a failed folder fetch renders an empty list
    # propagate:  a failed folder fetch becomes a 502 response
    on_folder_fetch_error: Literal["empty_list", "propagate"] = Field(default="empty_list")

    # ── Object storage ────────────────────────────────────────────────────
    # s3:    any S3-compatible bucket (AWS, MinIO, R2...) via boto3
    # local: files written under storage_root and served from /storage
    storage_driver: Literal["s3", "local"] = Field(default="s3")

    # Public base URL that object keys are appended to
    # e.g. https://my-bucket.s3.amazonaws.com  ->  <url>/notes/<filename>
    storage_url: str = Field(default="http://localhost:8000/storage")

    storage_root: str = Field(default="./storage")

    s3_bucket: str = Field(default="")
    s3_region: Optional[str] = Field(default=None)
    s3_endpoint_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # What: Maximum allowed attachment size in bytes
    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    max_file_size: int = Field(default=10_485_760, ge=1, le=104_857_600)

    # ── Sessions (flash messages) ─────────────────────────────────────────
    session_secret_key: str = Field(default="change-me-in-production")

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def storage_url_base(self) -> str:
        return self.storage_url.rstrip("/")

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("notes_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # NOTES_API_BASE_URL and notes_api_base_url both work
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if self.storage_driver == "s3" and not self.s3_bucket:
            errors.append("S3_BUCKET is not set but STORAGE_DRIVER is 's3'.")
        if self.session_secret_key == "change-me-in-production":
            errors.append("SESSION_SECRET_KEY is still the development default.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
