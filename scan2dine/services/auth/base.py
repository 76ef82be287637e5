"""
Auth Service Abstract Base Class

Defines the interface for the hosted account provider that owners sign
up and sign in with. Both MockAuthService (development) and
FirebaseAuthService (production) implement it.

Like the other services, expected failures (wrong password, email taken)
come back as an unsuccessful AuthResult instead of an exception; the web
layer decides how to show them.

Author: Khalil_Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthResult:
    """
    Result from a sign-up or sign-in attempt.

    Attributes:
        success: Whether the provider accepted the credentials
        account_id: Provider user id (also the restaurant document id)
        email: Normalized email of the account
        id_token: Provider session token, when the provider issues one
        error_message: Human readable reason for a failure
        error_code: Machine-readable provider error code
        provider: Provider name
    """
    success: bool
    account_id: Optional[str] = None
    email: Optional[str] = None
    id_token: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    provider: str = "unknown"


class BaseAuthService(ABC):
    """Abstract base class for owner authentication providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthResult:
        """Create an account and sign it in."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Verify email/password credentials."""
        pass

    @abstractmethod
    async def sign_out(self, account_id: str) -> None:
        """End the provider-side session of an account."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass
