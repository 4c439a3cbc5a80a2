from typing import Optional
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from .errors import ConfigurationError
from .utils.utils_movies_client import BASE_URL


class Settings(BaseSettings):
    API_KEY_MOVIES: str = Field(min_length=1)
    APIKEY: str = Field(min_length=1)
    FIREBASE_CREDENTIALS: Optional[str] = None
    FIREBASE_PROJECT_ID: Optional[str] = None
    TMDB_BASE_URL: str = BASE_URL
    HTTP_TIMEOUT: float = 10.0
    PROTECT_MOVIE_ROUTES: bool = False
    APPLICATION_NAME: str = 'movie-bff'
    PORT: int = 3000
    LOG_LEVEL: str = 'INFO'

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
    )


def load_settings(**overrides) -> Settings:
    """
    Read settings from the environment, failing hard when a required key is missing.

    :param overrides: explicit values taking precedence over the environment.
    :return: frozen Settings instance.
    :raises ConfigurationError: if API_KEY_MOVIES or APIKEY is absent or empty.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = sorted({str(err['loc'][0]) for err in e.errors() if err['loc']})
        raise ConfigurationError(
            f"Missing or invalid configuration: {', '.join(fields)}"
        ) from e
