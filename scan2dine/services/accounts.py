"""
Owner Accounts

Sign-up, sign-in and sign-out on top of the auth provider. The signed-in
owner is represented by an OwnerSession value that the web layer keeps
in the cookie session and passes explicitly to the editor.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from scan2dine.core.exceptions import AuthError
from scan2dine.schemas import LoginDraft, SignupDraft
from scan2dine.services.auth.base import AuthResult, BaseAuthService
from scan2dine.services.gateway.base import BaseMenuGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerSession:
    """
    The authenticated owner of a request.

    Attributes:
        account_id: Provider user id; also the restaurant id
        email: Account email
        display_name: Owner name, when known
    """
    account_id: str
    email: str
    display_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["OwnerSession"]:
        """Rebuild from cookie data; None for missing or malformed data."""
        if not data or not data.get("account_id") or not data.get("email"):
            return None
        return cls(
            account_id=str(data["account_id"]),
            email=str(data["email"]),
            display_name=data.get("display_name"),
        )


def _require_success(result: AuthResult) -> AuthResult:
    if not result.success or not result.account_id:
        raise AuthError(result.error_message or "Authentication failed", code=result.error_code)
    return result


async def register_owner(
    auth: BaseAuthService,
    gateway: BaseMenuGateway,
    draft: SignupDraft,
) -> OwnerSession:
    """
    Create the account, then its restaurant document.

    Raises:
        AuthError: The provider refused the account
        BackendError: The restaurant document could not be written
    """
    result = _require_success(await auth.sign_up(draft.email, draft.password))
    await gateway.create_restaurant(result.account_id, draft.restaurant_fields())
    logger.info(f"Owner registered: {result.email} -> restaurant {result.account_id}")
    return OwnerSession(
        account_id=result.account_id,
        email=result.email or draft.email,
        display_name=draft.owner_name,
    )


async def authenticate_owner(auth: BaseAuthService, draft: LoginDraft) -> OwnerSession:
    """
    Raises:
        AuthError: Wrong credentials or provider unavailable
    """
    result = _require_success(await auth.sign_in(draft.email, draft.password))
    return OwnerSession(account_id=result.account_id, email=result.email or draft.email)


async def end_session(auth: BaseAuthService, session: OwnerSession) -> None:
    await auth.sign_out(session.account_id)
    logger.info(f"Owner signed out: {session.email}")
