from typing import Awaitable, List
from fastapi import APIRouter, Depends, HTTPException, Query
from ..clients.movie_client import CatalogClient
from ..dependencies import get_catalog_client, guard_movie_routes
from ..errors import CatalogUnavailable
from ..schemas.common_schemas import ErrorResponse
from ..schemas.movies_schemas import DiscoverQuery, Genre, JsonValue, MovieFilterQuery

router = APIRouter(
    prefix='/movie',
    tags=['movie'],
    dependencies=[Depends(guard_movie_routes)],
    responses={500: {'model': ErrorResponse}},
)


async def _forward(call: Awaitable[JsonValue]) -> JsonValue:
    try:
        return await call
    except CatalogUnavailable as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get('/popular')
async def get_popular_movies(catalog: CatalogClient = Depends(get_catalog_client)):
    return await _forward(catalog.get_popular())


@router.get('/now_playing')
async def get_now_playing_movies(catalog: CatalogClient = Depends(get_catalog_client)):
    return await _forward(catalog.get_now_playing())


@router.get('/upcoming')
async def get_upcoming_movies(catalog: CatalogClient = Depends(get_catalog_client)):
    return await _forward(catalog.get_upcoming())


@router.get('/top_rated')
async def get_top_rated_movies(catalog: CatalogClient = Depends(get_catalog_client)):
    return await _forward(catalog.get_top_rated())


# Genre only documents the shape; the upstream list is returned untouched.
@router.get('/genres', responses={200: {'model': List[Genre]}, 404: {'model': ErrorResponse}})
async def get_movie_genres(catalog: CatalogClient = Depends(get_catalog_client)):
    return await _forward(catalog.get_genres())


@router.get('/filter', responses={400: {'model': ErrorResponse}, 404: {'model': ErrorResponse}})
async def filter_movies(
    params: MovieFilterQuery = Depends(),
    catalog: CatalogClient = Depends(get_catalog_client)
):
    return await _forward(catalog.filter(params))


@router.get('/discover')
async def discover_movies(
    params: DiscoverQuery = Depends(),
    catalog: CatalogClient = Depends(get_catalog_client)
):
    return await _forward(catalog.discover(params.id, params.keywords))


@router.get('/search', responses={400: {'model': ErrorResponse}})
async def search_movies(
    term: str = Query(min_length=1),
    catalog: CatalogClient = Depends(get_catalog_client)
):
    return await _forward(catalog.search(term))


@router.get('/list-movies', responses={400: {'model': ErrorResponse}})
async def list_movies(
    id: str = Query(min_length=1),
    catalog: CatalogClient = Depends(get_catalog_client)
):
    return await _forward(catalog.list_by_genre(id))


@router.get('/{movie_id}/videos')
async def get_movie_videos(
    movie_id: str,
    catalog: CatalogClient = Depends(get_catalog_client)
):
    return await _forward(catalog.get_movie_videos(movie_id))


# Declared last: the integer path would otherwise shadow the named routes above.
@router.get('/{movie_id}', responses={400: {'model': ErrorResponse}})
async def get_movie(
    movie_id: int,
    catalog: CatalogClient = Depends(get_catalog_client)
):
    return await _forward(catalog.get_movie_details(movie_id))
