import pytest
from werkzeug.security import check_password_hash

from scan2dine.core.exceptions import AuthError
from scan2dine.schemas import LoginDraft, SignupDraft
from scan2dine.services.accounts import OwnerSession, authenticate_owner, end_session, register_owner


def _signup(email="jane@example.com", password="secret1") -> SignupDraft:
    return SignupDraft(owner_name="Jane", restaurant_name="Chez Nous", email=email, password=password)


async def test_register_creates_account_and_restaurant(auth_service, gateway):
    session = await register_owner(auth_service, gateway, _signup())

    restaurant = await gateway.fetch_restaurant(session.account_id)
    assert restaurant.name == "Chez Nous"
    assert restaurant.owner_name == "Jane"
    assert restaurant.is_setup_complete is False
    assert session.display_name == "Jane"


async def test_register_duplicate_email(auth_service, gateway):
    await register_owner(auth_service, gateway, _signup())

    with pytest.raises(AuthError) as exc_info:
        await register_owner(auth_service, gateway, _signup())

    assert exc_info.value.code == "EMAIL_EXISTS"


async def test_sign_in_and_out(auth_service, gateway):
    registered = await register_owner(auth_service, gateway, _signup())

    session = await authenticate_owner(auth_service, LoginDraft(email="JANE@example.com", password="secret1"))
    assert session.account_id == registered.account_id
    assert auth_service.is_signed_in(session.account_id)

    await end_session(auth_service, session)
    assert not auth_service.is_signed_in(session.account_id)


async def test_wrong_password(auth_service, gateway):
    await register_owner(auth_service, gateway, _signup())

    with pytest.raises(AuthError, match="Invalid email or password"):
        await authenticate_owner(auth_service, LoginDraft(email="jane@example.com", password="nope"))


async def test_mock_rejects_weak_password(auth_service):
    result = await auth_service.sign_up("a@b.co", "123")
    assert result.success is False
    assert result.error_code == "WEAK_PASSWORD"


async def test_mock_stores_password_hash_only(auth_service):
    await auth_service.sign_up("jane@example.com", "secret1")

    stored = auth_service._accounts["jane@example.com"].password_hash
    assert stored != "secret1"
    assert check_password_hash(stored, "secret1")
    assert not check_password_hash(stored, "secret2")


def test_owner_session_from_cookie_data():
    session = OwnerSession(account_id="r1", email="a@b.co")
    assert OwnerSession.from_dict(session.to_dict()) == session
    assert OwnerSession.from_dict({"account_id": "r1"}) is None
    assert OwnerSession.from_dict(None) is None
