"""
Mock Auth Service

Keeps owner accounts in process memory for development and tests.
Passwords are stored as werkzeug password hashes, never in clear text.
Error messages mirror the hosted provider's so the UI behaves the same.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import logging
import secrets
import uuid
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from scan2dine.services.auth.base import AuthResult, BaseAuthService

logger = logging.getLogger(__name__)


@dataclass
class _Account:
    account_id: str
    email: str
    password_hash: str


class MockAuthService(BaseAuthService):
    """In-memory account store."""

    MIN_PASSWORD_LENGTH = 6

    def __init__(self):
        self._accounts: dict[str, _Account] = {}
        self._signed_in: set[str] = set()
        logger.info("MockAuthService initialized")

    @property
    def provider_name(self) -> str:
        return "mock"

    def _failure(self, code: str, message: str) -> AuthResult:
        return AuthResult(
            success=False,
            error_code=code,
            error_message=message,
            provider=self.provider_name,
        )

    async def sign_up(self, email: str, password: str) -> AuthResult:
        await asyncio.sleep(0)
        email = email.strip().lower()

        if email in self._accounts:
            return self._failure("EMAIL_EXISTS", "An account with this email already exists")
        if len(password) < self.MIN_PASSWORD_LENGTH:
            return self._failure(
                "WEAK_PASSWORD",
                f"Password should be at least {self.MIN_PASSWORD_LENGTH} characters",
            )

        account = _Account(
            account_id=uuid.uuid4().hex[:28],
            email=email,
            password_hash=generate_password_hash(password),
        )
        self._accounts[email] = account
        self._signed_in.add(account.account_id)
        logger.info(f"Mock account created: {email} ({account.account_id})")

        return AuthResult(
            success=True,
            account_id=account.account_id,
            email=email,
            id_token=f"mock_token_{secrets.token_hex(8)}",
            provider=self.provider_name,
        )

    async def sign_in(self, email: str, password: str) -> AuthResult:
        await asyncio.sleep(0)
        email = email.strip().lower()
        account = self._accounts.get(email)

        if account is None or not check_password_hash(account.password_hash, password):
            logger.info(f"Mock sign-in rejected for {email}")
            return self._failure("INVALID_LOGIN_CREDENTIALS", "Invalid email or password")

        self._signed_in.add(account.account_id)
        logger.info(f"Mock sign-in: {email}")
        return AuthResult(
            success=True,
            account_id=account.account_id,
            email=email,
            id_token=f"mock_token_{secrets.token_hex(8)}",
            provider=self.provider_name,
        )

    async def sign_out(self, account_id: str) -> None:
        self._signed_in.discard(account_id)
        logger.info(f"Mock sign-out: {account_id}")

    def is_signed_in(self, account_id: str) -> bool:
        return account_id in self._signed_in

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
