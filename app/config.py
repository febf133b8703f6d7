# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.REDIS_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every value has a development default, so the API starts without a .env
    file. Production deployments must override SECRET_KEY and API_PASSWORD.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing access tokens"
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )

    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Lifetime of issued access tokens"
    )

    API_USERNAME: str = Field(
        default="editor",
        min_length=1,
        description="Username accepted by POST /auth/token"
    )

    API_PASSWORD: str = Field(
        default="editor-password",
        min_length=8,
        description="Password accepted by POST /auth/token"
    )

    # Admins may delete any card (comma-separated usernames)
    ADMIN_USERNAMES: str = Field(
        default="",
        description="Usernames with admin rights (comma-separated)"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery and WebSocket fan-out)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker and pub/sub"
    )

    ENABLE_REDIS_LISTENER: bool = Field(
        default=True,
        description="Bridge worker events from Redis pub/sub to WebSocket clients"
    )

    # -------------------------------------------------------------------------
    # Card Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_KB: int = Field(
        default=512,
        ge=1,
        le=10240,
        description="Maximum card upload size in KB"
    )

    ALLOWED_EXTENSIONS: str = Field(
        default=".md,.markdown",
        description="Allowed card file extensions (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Card Settings
    # -------------------------------------------------------------------------

    BUNDLED_CARD_PATH: str = Field(
        default=str(PROJECT_ROOT / "docs" / "fastapi_reference_card.md"),
        description="Reference card registered at startup"
    )

    LOAD_BUNDLED_CARD: bool = Field(
        default=True,
        description="Register the bundled card at startup"
    )

    LINT_ON_UPLOAD: bool = Field(
        default=True,
        description="Lint uploaded cards in a background task"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat empty env vars as unset
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
        # The .env file may hold worker-only keys
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """
        Parse ALLOWED_EXTENSIONS string into a list.

        Example: ".md, .markdown" -> [".md", ".markdown"]
        """
        return [ext.strip().lower() for ext in self.ALLOWED_EXTENSIONS.split(",") if ext.strip()]

    @property
    def admin_usernames_list(self) -> list[str]:
        return [name.strip() for name in self.ADMIN_USERNAMES.split(",") if name.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert KB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_KB * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
