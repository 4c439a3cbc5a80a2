import logging
from contextlib import asynccontextmanager
from typing import Optional
import firebase_admin
import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from firebase_admin import credentials
from .clients.identity_client import IdentityClient
from .clients.movie_client import CatalogClient
from .config import Settings, load_settings
from .errors import AuthenticationRejected, ConfigurationError
from .routers import movies, users

logger = logging.getLogger(__name__)

API_PREFIX = '/apis'
CORS_METHODS = ['GET', 'HEAD', 'PUT', 'PATCH', 'POST', 'DELETE', 'OPTIONS']

root_router = APIRouter(tags=['app'])


@root_router.get('/')
async def get_hello() -> str:
    return "Hello Worlds!"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def init_firebase(settings: Settings) -> firebase_admin.App:
    """
    Initialise a named firebase_admin App from the service-account file,
    or from application default credentials when no file is configured.

    :raises ConfigurationError: if the credentials cannot be loaded.
    """
    try:
        if settings.FIREBASE_CREDENTIALS:
            cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS)
        else:
            cred = credentials.ApplicationDefault()
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot load Firebase credentials: {e}") from e

    options = {'projectId': settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    return firebase_admin.initialize_app(cred, options, name=settings.APPLICATION_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = getattr(app.state, 'settings', None) or load_settings()
    app.state.settings = settings
    configure_logging(settings.LOG_LEVEL)

    firebase_app = init_firebase(settings)
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        app.state.catalog_client = CatalogClient(
            settings.API_KEY_MOVIES, client, settings.TMDB_BASE_URL
        )
        app.state.identity_client = IdentityClient(settings.APIKEY, client, firebase_app)
        logger.info("%s ready", settings.APPLICATION_NAME)
        try:
            yield
        finally:
            firebase_admin.delete_app(firebase_app)
            logger.info("%s stopped", settings.APPLICATION_NAME)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Rejected values are not echoed back: they may be passwords.
    errors = [
        {key: value for key, value in error.items() if key != 'input'}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={'detail': jsonable_encoder(errors)})


async def authentication_rejected_handler(request: Request, exc: AuthenticationRejected):
    return JSONResponse(
        status_code=401,
        content={'detail': 'Unauthorized'},
        headers={'WWW-Authenticate': 'Bearer'},
    )


def create_app(settings: Optional[Settings] = None, prefix: str = API_PREFIX) -> FastAPI:
    """
    Build the FastAPI application.

    :param settings: preloaded settings; when omitted they are read from the
        environment at startup and a missing key aborts the startup.
    :param prefix: path prefix applied to every route.
    """
    app = FastAPI(title='Movie BFF', lifespan=lifespan)
    if settings is not None:
        app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex='.*',
        allow_methods=CORS_METHODS,
        allow_headers=['*'],
        allow_credentials=True,
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AuthenticationRejected, authentication_rejected_handler)

    app.include_router(root_router, prefix=prefix)
    app.include_router(movies.router, prefix=prefix)
    app.include_router(users.router, prefix=prefix)
    return app


app = create_app()


def run() -> None:
    settings = load_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info("%s running on port %s", settings.APPLICATION_NAME, settings.PORT)
    uvicorn.run(create_app(settings), host='0.0.0.0', port=settings.PORT)


if __name__ == '__main__':
    run()
