from typing import Any, Optional
from pydantic import BaseModel

# Upstream catalog payloads are owned by TMDB and forwarded as-is.
JsonValue = Any


class MovieFilterQuery(BaseModel):
    genre: Optional[str] = None
    popularity: Optional[str] = None
    title: Optional[str] = None


class DiscoverQuery(BaseModel):
    id: Optional[str] = None
    keywords: Optional[str] = None


class Genre(BaseModel):
    id: int
    name: str
