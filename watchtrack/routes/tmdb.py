from fastapi import APIRouter, HTTPException, Query, status
from typing import Optional
import logging

from watchtrack.schemas.tmdb import MediaType, SearchResponse, TmdbItemDetails
from watchtrack.schemas.validation import parse_id
from watchtrack.services.tmdb_service import TMDBService, TMDBError

router = APIRouter(prefix="/api/tmdb", tags=["TMDB"])
logger = logging.getLogger(__name__)


def gateway_error(message: str, exc: TMDBError) -> HTTPException:
    """Map a gateway failure to the 500 {error, details} body"""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": message, "details": exc.details or exc.message}
    )


@router.get("/search", response_model=SearchResponse)
def search_titles(
    query: Optional[str] = Query(None, max_length=200, description="Free-text title query")
):
    """
    Multi-search TMDB for movies and TV shows

    An empty query returns no results without calling TMDB.
    """
    try:
        return {"results": list(TMDBService.search(query or ""))}
    except TMDBError as e:
        raise gateway_error("Failed to search TMDB.", e)


@router.get("/details", response_model=TmdbItemDetails)
def get_title_details(
    tmdbId: Optional[str] = Query(None, description="TMDB id"),
    type: Optional[str] = Query(None, description="movie, tv or show")
):
    """Fetch the details snapshot for one TMDB title"""
    media_type = MediaType.parse(type)
    if not tmdbId or media_type is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="tmdbId and type (movie/tv) are required."
        )
    try:
        tmdb_id = parse_id(tmdbId, "tmdbId")
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid tmdbId.")

    try:
        return TMDBService.get_details(tmdb_id, media_type)
    except TMDBError as e:
        logger.error(f"TMDB {media_type.value} details failed for id {tmdb_id}: {e.details or e.message}")
        raise gateway_error(f"Failed to fetch TMDB {media_type.value} details.", e)
