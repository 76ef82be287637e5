"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: In-memory data store and mock auth (no credentials needed)
    - STAGING: Real backends, test project
    - PRODUCTION: Firestore + Firebase Auth

ENV_MODE picks sensible defaults; DATA_BACKEND and AUTH_BACKEND can
override the backend choice independently, e.g. a self-hosted deployment
running on SQL with mock auth.

Usage:
    from scan2dine.core.config import get_settings

    settings = get_settings()
    if settings.data_backend == DataBackend.FIRESTORE:
        ...

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with in-memory services
        PRODUCTION: Live environment with Firebase
        STAGING: Pre-production testing against a test Firebase project
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class DataBackend(str, Enum):
    """Where menu items and restaurant profiles are stored."""
    MEMORY = "memory"
    SQL = "sql"
    FIRESTORE = "firestore"


class AuthBackend(str, Enum):
    """Who verifies owner credentials."""
    MOCK = "mock"
    FIREBASE = "firebase"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Sensitive values (API keys, session secret) should NEVER be committed
    to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Backends
        data_backend: memory / sql / firestore
        auth_backend: mock / firebase
        database_url: SQLAlchemy async connection string (sql backend)

        # Firebase
        firebase_credentials_path: Service account JSON file
        firebase_project_id: Firestore project id
        firebase_api_key: Web API key used for password sign-in

        # Web
        session_secret: Signing key for the session cookie
        public_base_url: Origin printed into QR codes
        flash_dismiss_seconds: Lifetime of dashboard banners
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Scan2Dine",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # ==========================================================================
    # BACKEND SELECTION
    # ==========================================================================

    data_backend: Optional[DataBackend] = Field(
        default=None,
        description="Menu data store (defaults from env_mode)"
    )
    auth_backend: Optional[AuthBackend] = Field(
        default=None,
        description="Owner authentication provider (defaults from env_mode)"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/scan2dine.db",
        description="SQLAlchemy async connection URL (sql backend only)"
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # ==========================================================================
    # FIREBASE
    # ==========================================================================

    firebase_credentials_path: Optional[str] = Field(
        default=None,
        description="Path to the Firebase service account JSON"
    )
    firebase_project_id: Optional[str] = Field(
        default=None,
        description="Firebase / Google Cloud project id"
    )
    firebase_api_key: Optional[str] = Field(
        default=None,
        description="Firebase Web API key (Identity Toolkit REST calls)"
    )
    firebase_auth_timeout: float = Field(
        default=10.0,
        description="Seconds before an Identity Toolkit call is abandoned"
    )

    # ==========================================================================
    # WEB / SESSION
    # ==========================================================================

    session_secret: str = Field(
        default="dev-only-change-me",
        description="Secret used to sign the session cookie"
    )
    session_max_age: int = Field(
        default=60 * 60 * 24 * 14,
        description="Session cookie lifetime in seconds"
    )
    public_base_url: Optional[str] = Field(
        default=None,
        description="Origin used in QR codes; request origin when unset"
    )
    flash_dismiss_seconds: int = Field(
        default=3,
        description="Seconds before a dashboard banner clears itself"
    )

    # ==========================================================================
    # MENU / ORDERING
    # ==========================================================================

    currency_symbol: str = Field(
        default="$",
        description="Currency shown next to prices and in order messages"
    )
    whatsapp_base_url: str = Field(
        default="https://wa.me",
        description="Messaging deep-link base"
    )

    # ==========================================================================
    # QR CODES
    # ==========================================================================

    qr_default_width: int = Field(
        default=300,
        description="Default QR image size in pixels"
    )
    qr_default_margin: int = Field(
        default=2,
        description="Default quiet zone in modules"
    )

    # ==========================================================================
    # DEVELOPMENT SIMULATION
    # ==========================================================================

    mock_failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of in-memory gateway calls that fail on purpose"
    )
    mock_latency_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Artificial latency added to in-memory gateway calls"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @model_validator(mode="after")
    def default_backends(self) -> "Settings":
        """Fill unset backends from the environment mode."""
        if self.data_backend is None:
            self.data_backend = (
                DataBackend.FIRESTORE if self.use_real_services else DataBackend.MEMORY
            )
        if self.auth_backend is None:
            self.auth_backend = (
                AuthBackend.FIREBASE if self.use_real_services else AuthBackend.MOCK
            )
        return self

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.data_backend == DataBackend.FIRESTORE and not self.firebase_credentials_path:
            missing.append("FIREBASE_CREDENTIALS_PATH")
        if self.auth_backend == AuthBackend.FIREBASE and not self.firebase_api_key:
            missing.append("FIREBASE_API_KEY")
        if self.use_real_services and self.session_secret == "dev-only-change-me":
            missing.append("SESSION_SECRET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once,
    keeping every service on the same configuration.

    Returns:
        Settings: Configured application settings

    Example:
        >>> settings = get_settings()
        >>> print(settings.data_backend)
        DataBackend.MEMORY
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured root logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)

    return logging.getLogger("scan2dine")
