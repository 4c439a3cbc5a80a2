from typing import Any, Dict, Optional
import httpx
from ..errors import CredentialError, IdentityError

SIGN_IN_URL = 'https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword'
REFRESH_URL = 'https://securetoken.googleapis.com/v1/token'

EMAIL_NOT_FOUND = 'EMAIL_NOT_FOUND'
INVALID_PASSWORD = 'INVALID_PASSWORD'
INVALID_REFRESH_TOKEN = 'INVALID_REFRESH_TOKEN'

REFRESH_FIELDS = {
    'id_token': 'idToken',
    'refresh_token': 'refreshToken',
    'expires_in': 'expiresIn',
}


def provider_message(resp: httpx.Response) -> str:
    """
    Extract the provider's error message from a failed identity response.
    Identity Toolkit errors look like {"error": {"code": 400, "message": "EMAIL_NOT_FOUND"}};
    the secure token endpoint uses the same envelope.

    :param resp: failed response.
    :return: the error message, or the HTTP reason when the body has none.
    """
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get('error')
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
        if isinstance(error, str):
            return error
    return resp.reason_phrase or f"HTTP {resp.status_code}"


def error_code(message: str) -> str:
    """
    Reduce a provider message to its documented code.
    Messages may carry a detail suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : Access ...".
    """
    return message.split(' : ', 1)[0].strip()


def classify_login_error(message: str) -> IdentityError:
    code = error_code(message)
    if code == EMAIL_NOT_FOUND:
        return CredentialError("User not found.")
    if code == INVALID_PASSWORD:
        return CredentialError("Invalid password.")
    return IdentityError(message)


def classify_refresh_error(message: Optional[str], refresh_token: str) -> IdentityError:
    if message and error_code(message) == INVALID_REFRESH_TOKEN:
        return CredentialError(f"Invalid refresh token: {refresh_token}.")
    return IdentityError("Failed to refresh token")


def rename_refresh_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rename the snake_case secure token fields to the camelCase the API returns.

    :param body: secure token response body.
    :return: {idToken, refreshToken, expiresIn}.
    :raises KeyError: if any of the three fields is missing.
    """
    return {out: body[wire] for wire, out in REFRESH_FIELDS.items()}
