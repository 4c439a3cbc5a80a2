import logging
from typing import Annotated, Optional
from fastapi import Depends, Header, Request
from .clients.identity_client import IdentityClient
from .clients.movie_client import CatalogClient
from .config import Settings
from .errors import AuthenticationRejected

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog_client(request: Request) -> CatalogClient:
    return request.app.state.catalog_client


def get_identity_client(request: Request) -> IdentityClient:
    return request.app.state.identity_client


async def is_authorized(
    authorization: Optional[str],
    identity: IdentityClient
) -> bool:
    """
    Decide whether an Authorization header carries a valid bearer token.
    Expects exactly "Bearer <token>"; anything else is rejected without
    contacting the identity provider.

    :param authorization: raw header value, None when absent.
    :param identity: client used to verify the token.
    :return: True only when the provider accepts the token.
    """
    if not authorization:
        logger.info("Authorization header not provided.")
        return False

    parts = authorization.split()
    if len(parts) != 2 or parts[0] != 'Bearer':
        logger.info('Invalid authorization format. Expected "Bearer <token>".')
        return False

    try:
        return await identity.verify(parts[1])
    except Exception:
        logger.exception("Unexpected failure while verifying token")
        return False


async def require_authenticated(
    identity: Annotated[IdentityClient, Depends(get_identity_client)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> None:
    if not await is_authorized(authorization, identity):
        raise AuthenticationRejected()


async def guard_movie_routes(
    settings: Annotated[Settings, Depends(get_settings)],
    identity: Annotated[IdentityClient, Depends(get_identity_client)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> None:
    """Apply the bearer check to catalog routes when PROTECT_MOVIE_ROUTES is on."""
    if settings.PROTECT_MOVIE_ROUTES:
        await require_authenticated(identity, authorization)
