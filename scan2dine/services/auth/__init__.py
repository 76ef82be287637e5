"""
Auth Service Factory

Returns the mock or Firebase account provider based on AUTH_BACKEND.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from scan2dine.core.config import AuthBackend, get_settings
from scan2dine.services.auth.base import AuthResult, BaseAuthService
from scan2dine.services.auth.mock import MockAuthService
from scan2dine.services.auth.firebase import FirebaseAuthService

logger = logging.getLogger(__name__)


@lru_cache()
def get_auth_service() -> BaseAuthService:
    """Get the configured auth service."""
    settings = get_settings()

    if settings.auth_backend == AuthBackend.FIREBASE:
        logger.info(f"Auth Service: Using FirebaseAuthService ({settings.env_mode.value} mode)")
        return FirebaseAuthService()

    logger.info("Auth Service: Using MockAuthService (development mode)")
    return MockAuthService()


def reset_auth_service() -> None:
    """Clear the cached service instance."""
    get_auth_service.cache_clear()


__all__ = [
    "get_auth_service",
    "reset_auth_service",
    "BaseAuthService",
    "AuthResult",
    "MockAuthService",
    "FirebaseAuthService",
]
