import httpx
import pytest

from scan2dine.core.config import Settings
from scan2dine.services.auth import firebase as firebase_module
from scan2dine.services.auth.firebase import FirebaseAuthService


def _service(monkeypatch, handler) -> FirebaseAuthService:
    monkeypatch.setattr(firebase_module, "get_settings", lambda: Settings(firebase_api_key="test-key"))
    monkeypatch.setattr(firebase_module, "get_firebase_app", lambda: None)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirebaseAuthService(http_client=client)


async def test_sign_in_success(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"localId": "uid-1", "email": "jane@example.com", "idToken": "tok"})

    result = await _service(monkeypatch, handler).sign_in(" Jane@Example.com ", "secret1")

    assert result.success is True
    assert result.account_id == "uid-1"
    assert "accounts:signInWithPassword" in seen["url"]
    assert "key=test-key" in seen["url"]


@pytest.mark.parametrize("raw,code,message", [
    ("EMAIL_EXISTS", "EMAIL_EXISTS", "An account with this email already exists"),
    ("INVALID_LOGIN_CREDENTIALS", "INVALID_LOGIN_CREDENTIALS", "Invalid email or password"),
    (
        "WEAK_PASSWORD : Password should be at least 6 characters",
        "WEAK_PASSWORD",
        "Password should be at least 6 characters",
    ),
])
async def test_provider_errors(monkeypatch, raw, code, message):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"code": 400, "message": raw}})

    result = await _service(monkeypatch, handler).sign_up("jane@example.com", "secret1")

    assert result.success is False
    assert result.error_code == code
    assert result.error_message == message


async def test_network_error(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    result = await _service(monkeypatch, handler).sign_in("jane@example.com", "secret1")

    assert result.success is False
    assert result.error_code == "NETWORK_ERROR"


@pytest.mark.parametrize("status", [200, 502])
async def test_html_gateway_page_is_a_network_error(monkeypatch, status):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text="<html><body>Bad Gateway</body></html>")

    result = await _service(monkeypatch, handler).sign_in("jane@example.com", "secret1")

    assert result.success is False
    assert result.error_code == "NETWORK_ERROR"
    assert result.error_message == "Authentication service unavailable, please try again"


def test_requires_api_key(monkeypatch):
    monkeypatch.setattr(firebase_module, "get_settings", lambda: Settings(firebase_api_key=None))
    with pytest.raises(ValueError):
        FirebaseAuthService()
