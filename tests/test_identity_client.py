from types import SimpleNamespace

import httpx
import pytest
from firebase_admin import auth
from google.auth import exceptions as google_auth_exceptions

from movie_bff.clients.identity_client import IdentityClient
from movie_bff.errors import CredentialError, IdentityError, RegistrationFailed
from movie_bff.schemas.user_schemas import RegisterRequest
from movie_bff.utils.utils_identity_client import (
    REFRESH_URL,
    SIGN_IN_URL,
    error_code,
    provider_message,
)
from conftest import FakeHttpClient, make_response

FIREBASE_APP = object()


def identity_with(response=None, exc=None):
    http = FakeHttpClient(response, exc)
    return IdentityClient('firebase-key', http, FIREBASE_APP), http


def firebase_error(message):
    return make_response(400, json={"error": {"code": 400, "message": message}}, method='POST')


# --- login ---


@pytest.mark.asyncio
async def test_login_returns_token_triple():
    body = {
        "kind": "identitytoolkit#VerifyPasswordResponse",
        "idToken": "id-1",
        "refreshToken": "refresh-1",
        "expiresIn": "3600",
        "localId": "uid-1",
    }
    identity, http = identity_with(make_response(200, json=body, method='POST'))

    result = await identity.login("neo@matrix.io", "password1")

    assert result.model_dump(by_alias=True) == {
        "idToken": "id-1", "refreshToken": "refresh-1", "expiresIn": "3600"
    }
    call = http.calls[0]
    assert call['url'] == SIGN_IN_URL
    assert call['params'] == {'key': 'firebase-key'}
    assert call['json'] == {
        'email': 'neo@matrix.io', 'password': 'password1', 'returnSecureToken': True
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("message, expected", [
    ("EMAIL_NOT_FOUND", "User not found."),
    ("INVALID_PASSWORD", "Invalid password."),
])
async def test_login_classifies_credential_errors(message, expected):
    identity, _ = identity_with(firebase_error(message))

    with pytest.raises(CredentialError) as info:
        await identity.login("neo@matrix.io", "password1")
    assert info.value.message == expected


@pytest.mark.asyncio
async def test_login_passes_other_provider_messages_through():
    message = "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled."
    identity, _ = identity_with(firebase_error(message))

    with pytest.raises(IdentityError) as info:
        await identity.login("neo@matrix.io", "password1")
    assert not isinstance(info.value, CredentialError)
    assert info.value.message == message


@pytest.mark.asyncio
async def test_login_transport_failure():
    identity, _ = identity_with(exc=httpx.ConnectTimeout("slow"))

    with pytest.raises(IdentityError) as info:
        await identity.login("neo@matrix.io", "password1")
    assert info.value.status_code == 500


# --- refresh ---


@pytest.mark.asyncio
async def test_refresh_renames_wire_fields():
    body = {
        "id_token": "a",
        "refresh_token": "b",
        "expires_in": 3600,
        "token_type": "Bearer",
        "user_id": "uid-1",
    }
    identity, http = identity_with(make_response(200, json=body, method='POST'))

    result = await identity.refresh("old-refresh")

    assert result.model_dump(by_alias=True) == {
        "idToken": "a", "refreshToken": "b", "expiresIn": 3600
    }
    call = http.calls[0]
    assert call['url'] == REFRESH_URL
    assert call['json'] == {'grant_type': 'refresh_token', 'refresh_token': 'old-refresh'}


@pytest.mark.asyncio
async def test_refresh_invalid_token_names_the_token():
    identity, _ = identity_with(firebase_error("INVALID_REFRESH_TOKEN"))

    with pytest.raises(CredentialError) as info:
        await identity.refresh("stale")
    assert info.value.message == "Invalid refresh token: stale."


@pytest.mark.asyncio
async def test_refresh_other_failures_are_generic():
    identity, _ = identity_with(firebase_error("TOKEN_EXPIRED"))

    with pytest.raises(IdentityError) as info:
        await identity.refresh("stale")
    assert not isinstance(info.value, CredentialError)
    assert info.value.message == "Failed to refresh token"


@pytest.mark.asyncio
async def test_refresh_incomplete_response_is_generic_failure():
    identity, _ = identity_with(make_response(200, json={"id_token": "a"}, method='POST'))

    with pytest.raises(IdentityError) as info:
        await identity.refresh("r")
    assert info.value.message == "Failed to refresh token"


# --- register ---


def register_request():
    return RegisterRequest(
        firstName="Thomas", lastName="Anderson", email="neo@matrix.io",
        phoneNumber="+15555550100", password="password1",
    )


@pytest.mark.asyncio
async def test_register_creates_user(monkeypatch):
    seen = {}

    def fake_create_user(**kwargs):
        seen.update(kwargs)
        return SimpleNamespace(
            uid="uid-1", email=kwargs['email'], display_name=kwargs['display_name'],
            email_verified=False, disabled=False,
            user_metadata=SimpleNamespace(creation_timestamp=1700000000000),
        )

    monkeypatch.setattr(auth, "create_user", fake_create_user)
    identity, http = identity_with()

    account = await identity.register(register_request())

    assert seen == {
        'email': 'neo@matrix.io', 'password': 'password1',
        'display_name': 'Thomas Anderson', 'app': FIREBASE_APP,
    }
    assert account.model_dump(by_alias=True) == {
        "uid": "uid-1", "email": "neo@matrix.io", "displayName": "Thomas Anderson",
        "emailVerified": False, "disabled": False, "creationTimestamp": 1700000000000,
    }
    assert http.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    auth.EmailAlreadyExistsError("exists", None, None),
    ValueError("bad password"),
    google_auth_exceptions.RefreshError("invalid_grant: account not found"),
])
async def test_register_failure_is_generic(monkeypatch, error):
    def fake_create_user(**kwargs):
        raise error

    monkeypatch.setattr(auth, "create_user", fake_create_user)
    identity, _ = identity_with()

    with pytest.raises(RegistrationFailed) as info:
        await identity.register(register_request())
    assert info.value.message == "User registration failed"


# --- verify ---


@pytest.mark.asyncio
async def test_verify_accepts_valid_token(monkeypatch):
    def fake_verify(token, app=None):
        assert app is FIREBASE_APP
        return {"uid": "uid-1"}

    monkeypatch.setattr(auth, "verify_id_token", fake_verify)
    identity, _ = identity_with()

    assert await identity.verify("good") is True


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    auth.ExpiredIdTokenError("expired", None),
    auth.RevokedIdTokenError("revoked"),
    auth.InvalidIdTokenError("malformed"),
    auth.CertificateFetchError("no certs", None),
    ValueError("empty token"),
    google_auth_exceptions.RefreshError("invalid_grant: account not found"),
])
async def test_verify_swallows_every_failure(monkeypatch, error):
    def fake_verify(token, app=None):
        raise error

    monkeypatch.setattr(auth, "verify_id_token", fake_verify)
    identity, _ = identity_with()

    assert await identity.verify("bad") is False


# --- provider error parsing ---


def test_provider_message_reads_error_envelope():
    resp = firebase_error("INVALID_PASSWORD")
    assert provider_message(resp) == "INVALID_PASSWORD"


def test_provider_message_falls_back_to_reason():
    resp = make_response(503, content=b"upstream down", method='POST')
    assert provider_message(resp) == "Service Unavailable"


def test_error_code_strips_detail_suffix():
    assert error_code("TOO_MANY_ATTEMPTS_TRY_LATER : slow down") == "TOO_MANY_ATTEMPTS_TRY_LATER"
    assert error_code("EMAIL_NOT_FOUND") == "EMAIL_NOT_FOUND"
