"""
Firebase Auth Service

Production implementation. Email/password sign-up and sign-in go through
the Identity Toolkit REST API (the same endpoints the Firebase web SDK
calls); sign-out revokes the account's refresh tokens with firebase-admin.

Requirements:
    - FIREBASE_API_KEY (Web API key of the project)
    - Email/Password provider enabled in the Firebase console

API Documentation:
    https://firebase.google.com/docs/reference/rest/auth

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from typing import Any, Optional

import httpx
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from scan2dine.core.config import get_settings
from scan2dine.services.auth.base import AuthResult, BaseAuthService
from scan2dine.services.firebase_app import get_firebase_app

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Provider error codes -> messages shown on the login/signup forms
ERROR_MESSAGES = {
    "EMAIL_EXISTS": "An account with this email already exists",
    "EMAIL_NOT_FOUND": "Invalid email or password",
    "INVALID_PASSWORD": "Invalid email or password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "INVALID_EMAIL": "Invalid email format",
    "USER_DISABLED": "This account has been disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts, please try again later",
    "OPERATION_NOT_ALLOWED": "Email sign-in is not enabled for this project",
}


class FirebaseAuthService(BaseAuthService):
    """
    Firebase Authentication provider.

    Example:
        >>> service = FirebaseAuthService()
        >>> result = await service.sign_in("owner@example.com", "secret123")
        >>> result.account_id
        'f3Kx...'
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        """
        Raises:
            ValueError: If FIREBASE_API_KEY is not configured
        """
        settings = get_settings()

        if not settings.firebase_api_key:
            raise ValueError(
                "FIREBASE_API_KEY is required for Firebase authentication. "
                "Set it in your .env file or environment variables."
            )

        self._api_key = settings.firebase_api_key
        self._timeout = settings.firebase_auth_timeout
        self._http_client = http_client
        get_firebase_app()

        logger.info("FirebaseAuthService initialized")

    @property
    def provider_name(self) -> str:
        return "firebase"

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> httpx.Response:
        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}"
        params = {"key": self._api_key}
        if self._http_client is not None:
            return await self._http_client.post(url, params=params, json=payload)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, params=params, json=payload)

    def _unavailable(self) -> AuthResult:
        return AuthResult(
            success=False,
            error_code="NETWORK_ERROR",
            error_message="Authentication service unavailable, please try again",
            provider=self.provider_name,
        )

    def _parse(self, response: httpx.Response) -> AuthResult:
        # Proxies in front of the endpoint answer outages with HTML pages
        try:
            data = response.json()
        except ValueError:
            logger.error(f"Firebase auth returned a non-JSON {response.status_code} response")
            return self._unavailable()
        if not isinstance(data, dict):
            logger.error(f"Firebase auth returned an unexpected {response.status_code} body")
            return self._unavailable()

        if response.status_code != 200:
            raw = (data.get("error") or {}).get("message", "UNKNOWN")
            # Identity Toolkit appends details: "WEAK_PASSWORD : Password should be..."
            code = raw.split(" : ")[0].strip()
            message = ERROR_MESSAGES.get(code)
            if message is None:
                message = raw.split(" : ", 1)[1] if " : " in raw else "Authentication failed"
            logger.info(f"Firebase auth rejected request: {code}")
            return AuthResult(
                success=False,
                error_code=code,
                error_message=message,
                provider=self.provider_name,
            )

        return AuthResult(
            success=True,
            account_id=data.get("localId"),
            email=data.get("email"),
            id_token=data.get("idToken"),
            provider=self.provider_name,
        )

    async def _call(self, endpoint: str, email: str, password: str) -> AuthResult:
        payload = {
            "email": email.strip().lower(),
            "password": password,
            "returnSecureToken": True,
        }
        try:
            response = await self._post(endpoint, payload)
            return self._parse(response)
        except httpx.HTTPError as e:
            logger.error(f"Firebase auth request to {endpoint} failed: {e}")
            return self._unavailable()

    async def sign_up(self, email: str, password: str) -> AuthResult:
        return await self._call("accounts:signUp", email, password)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self._call("accounts:signInWithPassword", email, password)

    async def sign_out(self, account_id: str) -> None:
        """
        Revoke refresh tokens so other devices are signed out too.

        The local session is cleared by the caller regardless of the
        outcome; a failed revocation is only logged.
        """
        try:
            await asyncio.to_thread(firebase_auth.revoke_refresh_tokens, account_id)
            logger.info(f"Firebase tokens revoked for {account_id}")
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            logger.warning(f"Could not revoke tokens for {account_id}: {e}")

    async def health_check(self) -> bool:
        return bool(self._api_key)
