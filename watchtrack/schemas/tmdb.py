"""
TMDB gateway schemas
Search candidates and the flattened details shape copied into watch items
"""
from typing import List, Optional
from enum import Enum

from watchtrack.schemas.watchlist import CamelModel, TmdbSnapshot


class MediaType(str, Enum):
    """Media types understood by TMDB"""
    MOVIE = "movie"
    TV = "tv"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["MediaType"]:
        """Accept TMDB's names plus the watchlist's own 'show'"""
        if value == "show":
            return cls.TV
        try:
            return cls(value)
        except ValueError:
            return None


class SearchCandidate(CamelModel):
    """One movie/tv hit of a multi-search"""
    id: int
    name: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    media_type: MediaType


class SearchResponse(CamelModel):
    results: List[SearchCandidate] = []


class TmdbItemDetails(TmdbSnapshot):
    """Details flattened into the tmdb* watch item fields"""
