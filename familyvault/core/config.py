"""
familyvault/core/config.py

Purpose: Client configuration

- Loads environment variables
- Centralizes config values (API base URL, identity keys, upload limits)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings
from typing import Optional, Literal, List


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Backend REST API
    API_BASE_URL: str = Field(
        default="http://localhost:5000/api",
        description="Backend REST API base URL"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Transport timeout for backend requests in seconds"
    )

    # Identity provider (Firebase Auth REST)
    FIREBASE_API_KEY: Optional[str] = Field(
        default=None,
        description="Firebase web API key used for sign-in and token refresh"
    )
    IDENTITY_BASE_URL: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity toolkit REST base URL"
    )
    SECURE_TOKEN_BASE_URL: str = Field(
        default="https://securetoken.googleapis.com/v1",
        description="Secure token (refresh) REST base URL"
    )

    # Persisted key/value store
    TOKEN_STORE_PATH: str = Field(
        default="~/.familyvault/storage.json",
        description="File holding the persisted key/value entries"
    )
    TOKEN_STORE_KEY: str = Field(
        default="firebaseToken",
        description="Key under which the last bearer token is persisted"
    )

    # Uploads
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted upload in bytes (inclusive)"
    )
    ALLOWED_UPLOAD_TYPES: List[str] = Field(
        default=["application/pdf", "image/jpeg", "image/png"],
        description="Mime types accepted for document upload"
    )

    # Dashboard
    ALERT_DISMISS_SECONDS: float = Field(
        default=5.0,
        description="Seconds before an alert is dismissed automatically"
    )
    DOCUMENT_LIST_LIMIT: int = Field(
        default=50,
        description="Default page size when listing documents"
    )
    DEFAULT_FAMILY_NAME: str = Field(
        default="My Family",
        description="Name of the family group created on demand"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @field_validator("FIREBASE_API_KEY")
    @classmethod
    def validate_firebase_key(cls, v, info: ValidationInfo):
        """Ensure the identity key is set in production."""
        if info.data.get("ENVIRONMENT") == "production" and not v:
            raise ValueError("FIREBASE_API_KEY is required in production environment")
        return v

    @field_validator("API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on client startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    if not config.API_BASE_URL:
        errors.append("API_BASE_URL is required")

    if config.MAX_UPLOAD_BYTES <= 0:
        errors.append("MAX_UPLOAD_BYTES must be positive")

    if not config.ALLOWED_UPLOAD_TYPES:
        errors.append("ALLOWED_UPLOAD_TYPES must not be empty")

    # Production-specific validations
    if config.is_production:
        if not config.FIREBASE_API_KEY:
            errors.append("FIREBASE_API_KEY is required in production")
        if not config.API_BASE_URL.startswith("https://"):
            errors.append("API_BASE_URL must use https in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
