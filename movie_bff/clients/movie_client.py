import logging
from typing import Dict, Optional
import httpx
from ..errors import CatalogUnavailable
from ..schemas.movies_schemas import JsonValue, MovieFilterQuery
from ..utils.utils_movies_client import (
    BASE_URL,
    build_discover_params,
    build_filter_params,
    project_genres,
    read_catalog_body,
)

logger = logging.getLogger(__name__)


class CatalogClient:
    """
    Read-only proxy over the TMDB movie endpoints.
    Every method issues exactly one GET and returns the upstream body
    untouched, except get_genres which projects the genre list.
    """

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient,
        base_url: str = BASE_URL
    ):
        self._api_key = api_key
        self._client = client
        self._base_url = base_url.rstrip('/')

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None
    ) -> JsonValue:
        """
        Perform a single GET against TMDB with the API key appended.

        :param path: endpoint path below the base URL, starting with '/'.
        :param params: extra query parameters.
        :return: decoded upstream JSON body.
        :raises CatalogUnavailable: on any transport, status or empty-body failure.
        """
        query = {'api_key': self._api_key}
        if params:
            query.update(params)
        logger.debug("GET %s %s", path, sorted(params or {}))
        try:
            resp = await self._client.get(f"{self._base_url}{path}", params=query)
        except httpx.TimeoutException as e:
            logger.error("Catalog request to %s timed out", path)
            raise CatalogUnavailable("Catalog request timed out") from e
        except httpx.HTTPError as e:
            logger.error("Catalog request to %s failed: %s", path, type(e).__name__)
            raise CatalogUnavailable(f"Request failed: {type(e).__name__}") from e
        return read_catalog_body(resp)

    async def get_popular(self) -> JsonValue:
        return await self._get('/movie/popular')

    async def get_now_playing(self) -> JsonValue:
        return await self._get('/movie/now_playing')

    async def get_top_rated(self) -> JsonValue:
        return await self._get('/movie/top_rated')

    async def get_upcoming(self) -> JsonValue:
        return await self._get('/movie/upcoming')

    async def get_genres(self) -> JsonValue:
        """
        Fetch the TMDB movie genre list.

        :return: list of {id, name} entries, without the surrounding envelope.
        """
        body = await self._get('/genre/movie/list')
        return project_genres(body)

    async def get_movie_details(self, movie_id: int) -> JsonValue:
        return await self._get(f'/movie/{movie_id}')

    async def get_movie_videos(self, movie_id: str) -> JsonValue:
        return await self._get(f'/movie/{movie_id}/videos')

    async def discover(
        self,
        genre_id: Optional[str] = None,
        keywords: Optional[str] = None
    ) -> JsonValue:
        """
        Discover movies by genre and/or keywords.

        :param genre_id: Optional TMDB genre id.
        :param keywords: Optional TMDB keyword ids.
        :return: upstream discover result.
        """
        return await self._get(
            '/discover/movie', build_discover_params(genre_id, keywords)
        )

    async def list_by_genre(self, genre_id: str) -> JsonValue:
        return await self._get(
            '/discover/movie', build_discover_params(genre_id, None)
        )

    async def search(self, term: str) -> JsonValue:
        """
        Search movies by free text.

        :param term: search term forwarded as TMDB 'query'.
        :return: upstream search result.
        """
        return await self._get('/search/movie', {'query': term})

    async def filter(self, query: MovieFilterQuery) -> JsonValue:
        """
        Filter movies by genre, popularity ordering and title.

        :param query: MovieFilterQuery; absent fields add no upstream key.
        :return: upstream discover result.
        """
        return await self._get('/discover/movie', build_filter_params(query))
