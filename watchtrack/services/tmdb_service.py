import requests
import os
from typing import Dict, Iterator, Optional
from watchtrack.schemas.tmdb import MediaType, SearchCandidate, TmdbItemDetails
import logging

logger = logging.getLogger(__name__)


class TMDBError(Exception):
    """Raised when TMDB is unreachable, answers an error, or is not configured"""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


def _year(date_string: Optional[str]) -> Optional[int]:
    """Extract the year from a YYYY-MM-DD string"""
    if not date_string:
        return None
    head = date_string.split("-")[0]
    return int(head) if head.isdigit() else None


# TMDB Service to interact with The Movie Database API
class TMDBService:
    BASE_URL = "https://api.themoviedb.org/3"
    API_KEY = os.getenv("TMDB_API_KEY")
    REGION = os.getenv("TMDB_REGION", "US")
    TIMEOUT = float(os.getenv("TMDB_TIMEOUT", 10))

    # Internal method to make GET requests to TMDB API
    @classmethod
    def _make_request(cls, endpoint: str, params: Dict = None) -> Dict:
        """
        Make HTTP request to TMDB API.

        Args:
            endpoint: API endpoint (e.g., "/search/multi")
            params: Query parameters

        Returns:
            JSON response from TMDB

        Raises:
            TMDBError: If API key is missing or request fails
        """
        if not cls.API_KEY:
            raise TMDBError("TMDB API key is not configured.")
        params = dict(params or {})
        params['api_key'] = cls.API_KEY
        url = f"{cls.BASE_URL}{endpoint}"

        try:
            response = requests.get(url, params=params, timeout=cls.TIMEOUT)
            response.raise_for_status()
            logger.debug(f"TMDB API request successful: {endpoint}")
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"TMDB API error for {endpoint}: {str(e)}")
            raise TMDBError("TMDB request failed.", details=str(e))

    @classmethod
    def search(cls, query: str) -> Iterator[SearchCandidate]:
        """
        Multi-search movies and TV shows by free text.

        Yields only movie/tv hits that carry a displayable name; people and
        untitled entries are dropped. An empty query yields nothing without
        touching the network.
        """
        if not query or not query.strip():
            return iter(())

        data = cls._make_request("/search/multi", {'query': query.strip(), 'include_adult': 'false'})
        return cls._candidates(data.get('results') or [])

    @staticmethod
    def _candidates(results) -> Iterator[SearchCandidate]:
        for result in results:
            media_type = MediaType.parse(result.get('media_type'))
            name = result.get('title') or result.get('name')
            if media_type is None or not name or result.get('id') is None:
                continue
            yield SearchCandidate(
                id=result['id'],
                name=name,
                poster_path=result.get('poster_path'),
                release_date=result.get('release_date') or result.get('first_air_date') or None,
                media_type=media_type
            )

    @classmethod
    def get_details(cls, tmdb_id: int, media_type: MediaType) -> TmdbItemDetails:
        """
        Fetch full details plus certification and external ids in one call,
        flattened into the tmdb* fields of a watch item.
        """
        if media_type == MediaType.MOVIE:
            data = cls._make_request(
                f"/movie/{tmdb_id}",
                {'append_to_response': 'release_dates,external_ids'}
            )
            return cls._movie_details(data)

        data = cls._make_request(
            f"/tv/{tmdb_id}",
            {'append_to_response': 'content_ratings,external_ids'}
        )
        return cls._tv_details(data)

    @classmethod
    def _movie_details(cls, data: Dict) -> TmdbItemDetails:
        certification = None
        for country in (data.get('release_dates') or {}).get('results') or []:
            if country.get('iso_3166_1') != cls.REGION:
                continue
            for release in country.get('release_dates') or []:
                if release.get('certification'):
                    certification = release['certification']
                    break
            break

        return TmdbItemDetails(
            tmdb_id=data.get('id'),
            tmdb_poster_path=data.get('poster_path'),
            tmdb_overview=data.get('overview'),
            tmdb_tagline=data.get('tagline'),
            tmdb_imdb_id=(data.get('external_ids') or {}).get('imdb_id') or data.get('imdb_id') or None,
            tmdb_movie_runtime=data.get('runtime'),
            tmdb_movie_release_year=_year(data.get('release_date')),
            tmdb_movie_certification=certification
        )

    @classmethod
    def _tv_details(cls, data: Dict) -> TmdbItemDetails:
        certification = None
        for rating in (data.get('content_ratings') or {}).get('results') or []:
            if rating.get('iso_3166_1') == cls.REGION and rating.get('rating'):
                certification = rating['rating']
                break

        networks = ", ".join(n['name'] for n in data.get('networks') or [] if n.get('name'))

        return TmdbItemDetails(
            tmdb_id=data.get('id'),
            tmdb_poster_path=data.get('poster_path'),
            tmdb_overview=data.get('overview'),
            tmdb_tagline=data.get('tagline'),
            tmdb_imdb_id=(data.get('external_ids') or {}).get('imdb_id') or None,
            tmdb_tv_first_air_year=_year(data.get('first_air_date')),
            tmdb_tv_last_air_year=_year(data.get('last_air_date')),
            tmdb_tv_networks=networks or None,
            tmdb_tv_number_of_episodes=data.get('number_of_episodes'),
            tmdb_tv_number_of_seasons=data.get('number_of_seasons'),
            tmdb_tv_status=data.get('status'),
            tmdb_tv_certification=certification
        )
