"""
Watchlist list controller: fetch, filter, delete, edit and rate items
"""
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlencode
import json
import logging

from watchtrack.client.api import ApiError, WatchTrackClient
from watchtrack.client.form import WatchItemFormController

logger = logging.getLogger(__name__)

FILTER_TYPES = ["all", "movie", "show"]
FILTER_STATUSES = ["all", "want-to-watch", "watching", "finished", "dropped"]
RATINGS = ["loved", "liked", "not-for-me"]


@dataclass
class WatchlistFilters:
    type: str = "all"
    status: str = "all"

    @classmethod
    def from_query_string(cls, query: str) -> "WatchlistFilters":
        """Parse ``type``/``status``; unknown values fall back to all"""
        params = parse_qs(query.lstrip("?"))
        raw_type = (params.get("type") or ["all"])[0]
        raw_status = (params.get("status") or ["all"])[0]
        return cls(
            type=raw_type if raw_type in FILTER_TYPES else "all",
            status=raw_status if raw_status in FILTER_STATUSES else "all"
        )

    def to_query_string(self) -> str:
        params = {}
        if self.type != "all":
            params["type"] = self.type
        if self.status != "all":
            params["status"] = self.status
        return urlencode(params)

    def matches(self, item: Dict) -> bool:
        if self.type != "all" and item.get("type") != self.type:
            return False
        if self.status != "all" and item.get("status") != self.status:
            return False
        return True


class FilterStore:
    """Filters persisted to a small JSON file between runs"""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[WatchlistFilters]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable filter file {self.path}: {e}")
            return None
        return WatchlistFilters.from_query_string(
            urlencode({k: v for k, v in data.items() if k in ("type", "status")})
        )

    def save(self, filters: WatchlistFilters) -> None:
        self.path.write_text(json.dumps(asdict(filters)))


def ask_on_console(item: Dict) -> bool:
    answer = input(f"Delete '{item.get('title')}'? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


class WatchlistListController:
    """
    List view state.

    Initial filters come from ``query_string`` when given (the URL wins),
    otherwise from ``store``, otherwise all/all.
    """

    def __init__(
        self,
        client: WatchTrackClient,
        query_string: Optional[str] = None,
        store: Optional[FilterStore] = None,
        confirm: Callable[[Dict], bool] = ask_on_console,
        debounce_seconds: float = 0.5
    ):
        self.client = client
        self.store = store
        self.confirm = confirm
        self.debounce_seconds = debounce_seconds

        if query_string:
            self.filters = WatchlistFilters.from_query_string(query_string)
        else:
            self.filters = (store.load() if store else None) or WatchlistFilters()

        self.items: List[Dict] = []
        self.error: Optional[str] = None
        self.editing: Optional[WatchItemFormController] = None

    # ==================== LOADING ====================

    def load(self) -> List[Dict]:
        """Fetch the full list; filtering stays client-side"""
        try:
            self.items = self.client.list_items()
            self.error = None
        except ApiError as e:
            self.error = e.message
        return self.items

    refresh = load

    @property
    def visible_items(self) -> List[Dict]:
        return [item for item in self.items if self.filters.matches(item)]

    def set_filters(self, type: Optional[str] = None, status: Optional[str] = None) -> str:
        """Apply new filters; returns the query string to put in the URL"""
        if type is not None:
            if type not in FILTER_TYPES:
                raise ValueError(f"Unknown type filter: {type}")
            self.filters.type = type
        if status is not None:
            if status not in FILTER_STATUSES:
                raise ValueError(f"Unknown status filter: {status}")
            self.filters.status = status
        if self.store:
            self.store.save(self.filters)
        return self.filters.to_query_string()

    def _find(self, item_id: int) -> Dict:
        for item in self.items:
            if item["id"] == item_id:
                return item
        raise KeyError(item_id)

    # ==================== MUTATIONS ====================

    def delete(self, item_id: int) -> bool:
        """Delete after confirmation, then refetch; False when declined or failed"""
        item = self._find(item_id)
        if not self.confirm(item):
            return False
        try:
            self.client.delete_item(item_id)
        except ApiError as e:
            self.error = e.message
            return False
        self.load()
        return True

    def edit(self, item_id: int, **form_options) -> WatchItemFormController:
        """Open the form pre-populated with the item; saving refetches"""
        form_options.setdefault("debounce_seconds", self.debounce_seconds)
        self.editing = WatchItemFormController(
            self.client,
            item=self._find(item_id),
            on_saved=lambda saved: self.load(),
            **form_options
        )
        return self.editing

    @staticmethod
    def needs_rating(item: Dict) -> bool:
        return item.get("status") == "finished" and not item.get("rating")

    @property
    def rating_prompts(self) -> List[Dict]:
        """Finished items still waiting for a rating"""
        return [item for item in self.visible_items if self.needs_rating(item)]

    def rate(self, item_id: int, rating: str) -> Optional[Dict]:
        if rating not in RATINGS:
            raise ValueError(f"Rating must be one of: {', '.join(RATINGS)}")
        try:
            saved = self.client.update_item(item_id, {"rating": rating})
        except ApiError as e:
            self.error = e.message
            return None
        self.load()
        return saved
