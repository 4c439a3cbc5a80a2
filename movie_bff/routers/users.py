import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from ..clients.identity_client import IdentityClient
from ..dependencies import get_identity_client
from ..errors import IdentityError
from ..schemas.common_schemas import ErrorResponse
from ..schemas.user_schemas import (
    AccountResponse,
    AuthTokenResponse,
    LoginRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix='/user',
    tags=['user'],
    responses={400: {'model': ErrorResponse}, 500: {'model': ErrorResponse}},
)


@router.post('/register', response_model=AccountResponse)
async def register_user(
    body: RegisterRequest,
    identity: IdentityClient = Depends(get_identity_client)
):
    try:
        return await identity.register(body)
    except IdentityError as e:
        logger.error("Error registering user")
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post('/login', response_model=AuthTokenResponse)
async def login(
    body: LoginRequest,
    identity: IdentityClient = Depends(get_identity_client)
):
    try:
        return await identity.login(body.email, body.password)
    except IdentityError as e:
        logger.error("Error logging in user")
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post('/refresh-auth', response_model=AuthTokenResponse)
async def refresh_auth(
    refresh_token: str = Query(alias='refreshToken', min_length=1),
    identity: IdentityClient = Depends(get_identity_client)
):
    try:
        return await identity.refresh(refresh_token)
    except IdentityError as e:
        logger.error("Error refreshing authentication token")
        raise HTTPException(status_code=e.status_code, detail=e.message)
