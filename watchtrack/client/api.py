"""
HTTP client for the WatchTrack API

Works over a requests.Session by default. Anything exposing
``request(method, url, params=, json=, headers=, timeout=)`` and returning an
object with ``status_code`` and ``json()`` can be passed instead (FastAPI's
TestClient is one).
"""
from typing import Any, Dict, List, Optional
import logging
import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx answer from the API, carrying its {error, details} body"""

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details


class WatchTrackClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        access_token: Optional[str] = None,
        session=None,
        timeout: float = 10
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, params: Dict = None, json: Any = None) -> Any:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(0, "Network error", str(e))

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            details = body.get("details") if isinstance(body, dict) else None
            raise ApiError(response.status_code, message or f"HTTP {response.status_code}", details)
        return body

    # ==================== WATCHLIST ====================

    def list_items(self) -> List[Dict]:
        return self._request("GET", "/api/watchlist")

    def get_item(self, item_id: int) -> Dict:
        return self._request("GET", "/api/watchlist", params={"id": item_id})

    def create_item(self, payload: Dict) -> Dict:
        return self._request("POST", "/api/watchlist", json=payload)

    def update_item(self, item_id: int, changes: Dict) -> Dict:
        return self._request("PUT", "/api/watchlist", json={**changes, "id": item_id})

    def delete_item(self, item_id: int) -> None:
        self._request("DELETE", "/api/watchlist", params={"id": item_id})

    # ==================== TMDB ====================

    def search(self, query: str) -> List[Dict]:
        """Multi-search; a blank query short-circuits to no results"""
        if not query or not query.strip():
            return []
        return self._request("GET", "/api/tmdb/search", params={"query": query.strip()})["results"]

    def details(self, tmdb_id: int, media_type: str) -> Dict:
        return self._request("GET", "/api/tmdb/details", params={"tmdbId": tmdb_id, "type": media_type})

    # ==================== USER / ADMIN ====================

    def sync_user(self) -> Dict:
        return self._request("POST", "/api/user/sync")

    def record_session(self) -> None:
        self._request("POST", "/api/session")

    def admin_users(self, sort_by: str = "createdAt", sort_dir: str = "desc") -> List[Dict]:
        return self._request("GET", "/api/admin/users", params={"sortBy": sort_by, "sortDir": sort_dir})
