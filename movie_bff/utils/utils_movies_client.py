import logging
from typing import Dict, Optional
import httpx
from ..errors import CatalogUnavailable
from ..schemas.movies_schemas import JsonValue, MovieFilterQuery

logger = logging.getLogger(__name__)

BASE_URL = 'https://api.themoviedb.org/3'
POPULARITY_SORT = 'popularity.desc'

_FALSE_FLAGS = {'', 'false', '0', 'no', 'off'}


def is_flag_set(value: Optional[str]) -> bool:
    """
    Interpret an optional query-string flag.

    :param value: raw query value, or None when absent.
    :return: False for absent, empty or explicitly false values, else True.
    """
    if value is None:
        return False
    return value.strip().lower() not in _FALSE_FLAGS


def build_filter_params(query: MovieFilterQuery) -> Dict[str, str]:
    """
    Map filter criteria onto TMDB discover query keys.
    Absent criteria contribute no key at all.

    :param query: MovieFilterQuery with optional genre, popularity and title.
    :return: Dictionary of upstream query parameters (without the API key).
    """
    params: Dict[str, str] = {}
    if query.genre:
        params['with_genres'] = query.genre
    if is_flag_set(query.popularity):
        params['sort_by'] = POPULARITY_SORT
    if query.title:
        params['query'] = query.title
    return params


def build_discover_params(
    genre_id: Optional[str],
    keywords: Optional[str]
) -> Dict[str, str]:
    """
    Map discover criteria onto TMDB discover query keys.

    :param genre_id: Optional TMDB genre id.
    :param keywords: Optional comma separated TMDB keyword ids.
    :return: Dictionary of upstream query parameters (without the API key).
    """
    params: Dict[str, str] = {}
    if genre_id:
        params['with_genres'] = genre_id
    if keywords:
        params['with_keywords'] = keywords
    return params


def project_genres(body: JsonValue) -> JsonValue:
    """
    Keep only the genre list of a TMDB genre response.

    :param body: upstream JSON body.
    :return: the value of its 'genres' field, items unchanged.
    :raises CatalogUnavailable: if the body carries no 'genres' list.
    """
    genres = body.get('genres') if isinstance(body, dict) else None
    if not isinstance(genres, list):
        raise CatalogUnavailable("Catalog returned no genres", status_code=404)
    return genres


def read_catalog_body(resp: httpx.Response) -> JsonValue:
    """
    Turn a TMDB response into its JSON body, classifying every failure
    as CatalogUnavailable. The upstream status is preserved on HTTP errors.

    An empty object or list is a legitimate result; only a missing body
    or a JSON null counts as "no data".

    :param resp: response returned by the HTTP client.
    :return: decoded JSON body.
    """
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.warning(
            "Catalog request to %s failed with status %s",
            e.request.url.path, status
        )
        raise CatalogUnavailable(f"Request failed: {status}", status_code=status) from e

    if not resp.content:
        raise CatalogUnavailable("Catalog returned no data", status_code=404)
    try:
        data = resp.json()
    except ValueError as e:
        raise CatalogUnavailable("Catalog returned an unreadable body") from e
    if data is None:
        raise CatalogUnavailable("Catalog returned no data", status_code=404)
    return data
