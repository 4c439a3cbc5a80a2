import logging
from typing import Any, Dict
import httpx
from fastapi.concurrency import run_in_threadpool
from firebase_admin import App, auth, exceptions
from google.auth import exceptions as google_auth_exceptions
from ..errors import IdentityError, RegistrationFailed
from ..schemas.user_schemas import AccountResponse, AuthTokenResponse, RegisterRequest
from ..utils.utils_identity_client import (
    REFRESH_URL,
    SIGN_IN_URL,
    classify_login_error,
    classify_refresh_error,
    provider_message,
    rename_refresh_fields,
)

logger = logging.getLogger(__name__)

# The Admin SDK wraps transport errors in FirebaseError but lets credential
# failures (e.g. a revoked service-account key) surface as GoogleAuthError.
PROVIDER_ERRORS = (ValueError, exceptions.FirebaseError, google_auth_exceptions.GoogleAuthError)


class IdentityClient:
    """
    Account operations against Firebase Authentication.

    Sign-in and token refresh go through the public REST endpoints keyed by
    the project's Web API key; account creation and ID token verification use
    the Admin SDK bound to an explicitly initialised firebase_admin App.
    """

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient,
        firebase_app: App,
        sign_in_url: str = SIGN_IN_URL,
        refresh_url: str = REFRESH_URL
    ):
        self._api_key = api_key
        self._client = client
        self._app = firebase_app
        self._sign_in_url = sign_in_url
        self._refresh_url = refresh_url

    async def _post(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        return await self._client.post(
            url,
            params={'key': self._api_key},
            json=payload,
            headers={'Content-Type': 'application/json'},
        )

    async def register(self, request: RegisterRequest) -> AccountResponse:
        """
        Create a Firebase account from a validated registration request.

        :param request: RegisterRequest body.
        :return: projection of the created user record.
        :raises RegistrationFailed: on any provider failure.
        """
        try:
            record = await run_in_threadpool(
                auth.create_user,
                email=request.email,
                password=request.password,
                display_name=request.display_name,
                app=self._app,
            )
        except PROVIDER_ERRORS as e:
            logger.error("Error creating user: %s", e)
            raise RegistrationFailed("User registration failed") from e

        logger.info("Created user %s", record.uid)
        return AccountResponse(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            email_verified=record.email_verified,
            disabled=record.disabled,
            creation_timestamp=record.user_metadata.creation_timestamp,
        )

    async def login(self, email: str, password: str) -> AuthTokenResponse:
        """
        Sign in with email and password.

        :param email: account email.
        :param password: account password.
        :return: idToken, refreshToken and expiresIn issued by the provider.
        :raises CredentialError: for EMAIL_NOT_FOUND and INVALID_PASSWORD.
        :raises IdentityError: with the provider's message for anything else.
        """
        payload = {'email': email, 'password': password, 'returnSecureToken': True}
        try:
            resp = await self._post(self._sign_in_url, payload)
        except httpx.HTTPError as e:
            logger.error("Sign-in request failed: %s", type(e).__name__)
            raise IdentityError("Identity service unavailable") from e

        if resp.is_error:
            message = provider_message(resp)
            logger.warning("Sign-in rejected with status %s: %s", resp.status_code, message)
            raise classify_login_error(message)

        try:
            return AuthTokenResponse.model_validate(resp.json())
        except ValueError as e:
            raise IdentityError("Unexpected sign-in response") from e

    async def refresh(self, refresh_token: str) -> AuthTokenResponse:
        """
        Exchange a refresh token for a new ID token.

        :param refresh_token: token previously issued by login or refresh.
        :return: idToken, refreshToken and expiresIn, renamed from the wire's snake_case.
        :raises CredentialError: for INVALID_REFRESH_TOKEN.
        :raises IdentityError: for every other failure.
        """
        payload = {'grant_type': 'refresh_token', 'refresh_token': refresh_token}
        try:
            resp = await self._post(self._refresh_url, payload)
        except httpx.HTTPError as e:
            logger.error("Token refresh request failed: %s", type(e).__name__)
            raise classify_refresh_error(None, refresh_token) from e

        if resp.is_error:
            message = provider_message(resp)
            logger.warning("Token refresh rejected with status %s: %s", resp.status_code, message)
            raise classify_refresh_error(message, refresh_token)

        try:
            return AuthTokenResponse.model_validate(rename_refresh_fields(resp.json()))
        except (KeyError, TypeError, ValueError) as e:
            raise classify_refresh_error(None, refresh_token) from e

    async def verify(self, token: str) -> bool:
        """
        Check a Firebase ID token. Never raises: the reason for a rejection
        is logged and the caller only sees False.
        """
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, token, app=self._app)
        except auth.ExpiredIdTokenError:
            logger.info("Token has expired.")
            return False
        except auth.RevokedIdTokenError:
            logger.info("Token has been revoked.")
            return False
        except auth.InvalidIdTokenError:
            logger.info("Invalid ID token provided.")
            return False
        except PROVIDER_ERRORS as e:
            logger.warning("Error verifying token: %s", e)
            return False

        logger.debug("Verified token for uid %s", decoded.get('uid'))
        return True
