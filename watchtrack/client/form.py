"""
Add/Edit form controller

Holds the draft of one watch item, runs debounced TMDB searches while the
title is typed, merges the details of a selected match into the draft and
submits it as a create or an update.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging
import threading

from watchtrack.client.api import ApiError, WatchTrackClient

logger = logging.getLogger(__name__)

# Snapshot keys copied from /api/tmdb/details into the item
TMDB_FIELDS = [
    "tmdbId",
    "tmdbPosterPath",
    "tmdbOverview",
    "tmdbTagline",
    "tmdbImdbId",
    "tmdbMovieRuntime",
    "tmdbMovieReleaseYear",
    "tmdbMovieCertification",
    "tmdbTvFirstAirYear",
    "tmdbTvLastAirYear",
    "tmdbTvNetworks",
    "tmdbTvNumberOfEpisodes",
    "tmdbTvNumberOfSeasons",
    "tmdbTvStatus",
    "tmdbTvCertification",
]


class DraftValidationError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def _parse_season(raw, label: str, errors: List[str]) -> Optional[int]:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if not text.isdigit():
        errors.append(f"{label} must be a whole number")
        return None
    return int(text)


@dataclass
class WatchItemDraft:
    """Editable fields as typed; season fields stay text until submit"""
    title: str = ""
    type: str = "movie"
    status: str = "want-to-watch"
    current_season: str = ""
    total_seasons: str = ""
    notes: str = ""
    rating: Optional[str] = None
    tmdb: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_item(cls, item: Dict) -> "WatchItemDraft":
        return cls(
            title=item.get("title") or "",
            type=item.get("type") or "movie",
            status=item.get("status") or "want-to-watch",
            current_season="" if item.get("currentSeason") is None else str(item["currentSeason"]),
            total_seasons="" if item.get("totalSeasons") is None else str(item["totalSeasons"]),
            notes=item.get("notes") or "",
            rating=item.get("rating"),
            tmdb={key: item[key] for key in TMDB_FIELDS if item.get(key) is not None}
        )

    def to_payload(self) -> Dict:
        """
        Validate and build the wire payload.

        Every snapshot key is sent, None when absent, so an update also clears
        metadata of a match that was dropped.
        """
        errors = []
        title = self.title.strip()
        if not title:
            errors.append("Title is required")
        current_season = _parse_season(self.current_season, "Current season", errors)
        total_seasons = _parse_season(self.total_seasons, "Total seasons", errors)
        if errors:
            raise DraftValidationError(errors)

        payload = {
            "title": title,
            "type": self.type,
            "status": self.status,
            "currentSeason": current_season,
            "totalSeasons": total_seasons,
            "notes": self.notes.strip() or None,
            "rating": self.rating,
        }
        for key in TMDB_FIELDS:
            payload[key] = self.tmdb.get(key)
        return payload


class Debouncer:
    """Run ``func`` once input has been quiet for ``delay`` seconds"""

    def __init__(self, delay: float, func: Callable, timer_factory=threading.Timer):
        self.delay = delay
        self.func = func
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending = None

    def call(self, *args) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = args
            self._timer = self._timer_factory(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            args, self._pending, self._timer = self._pending, None, None
        if args is not None:
            self.func(*args)

    def flush(self) -> bool:
        """Run the pending call now; returns False when nothing was pending"""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            args, self._pending, self._timer = self._pending, None, None
        if args is None:
            return False
        self.func(*args)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending, self._timer = None, None

    @property
    def pending(self) -> bool:
        return self._pending is not None


class WatchItemFormController:
    """
    Form state for adding a new item or editing ``item``.

    clear_match_on_title_edit: when True, typing over the title of a selected
    TMDB match drops the match and its snapshot and searches again. When
    False the match is kept and no search runs until clear_match() is called.
    """

    def __init__(
        self,
        client: WatchTrackClient,
        item: Optional[Dict] = None,
        debounce_seconds: float = 0.5,
        clear_match_on_title_edit: bool = True,
        on_saved: Optional[Callable[[Dict], None]] = None
    ):
        self.client = client
        self.editing_id = item["id"] if item else None
        self.draft = WatchItemDraft.from_item(item) if item else WatchItemDraft()
        self.clear_match_on_title_edit = clear_match_on_title_edit
        self.on_saved = on_saved

        self.results: List[Dict] = []
        self.selected: Optional[Dict] = None
        if item and item.get("tmdbId"):
            self.selected = {
                "id": item["tmdbId"],
                "name": item.get("title"),
                "mediaType": "tv" if item.get("type") == "show" else "movie",
            }
        self.error: Optional[str] = None
        self.closed = False
        self.last_saved: Optional[Dict] = None

        # Every keystroke bumps the sequence; only the newest search may land
        self._seq_lock = threading.Lock()
        self._seq = 0
        self._debouncer = Debouncer(debounce_seconds, self._run_search)

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def _next_seq(self) -> int:
        with self._seq_lock:
            self._seq += 1
            return self._seq

    def _is_latest(self, seq: int) -> bool:
        with self._seq_lock:
            return seq == self._seq

    # ==================== DRAFT EDITING ====================

    def set_title(self, title: str) -> None:
        self.draft.title = title
        if self.selected is not None:
            if not self.clear_match_on_title_edit:
                return
            self.clear_match()

        seq = self._next_seq()
        if title.strip():
            self._debouncer.call(seq, title)
        else:
            self._debouncer.cancel()
            self.results = []

    def set_field(self, name: str, value) -> None:
        if name == "title":
            self.set_title(value)
            return
        if name not in ("type", "status", "current_season", "total_seasons", "notes", "rating"):
            raise AttributeError(f"Unknown draft field: {name}")
        setattr(self.draft, name, value)

    def clear_match(self) -> None:
        self.selected = None
        self.draft.tmdb = {}

    # ==================== SEARCH ====================

    def flush_search(self) -> bool:
        """Run a pending debounced search immediately"""
        return self._debouncer.flush()

    def _run_search(self, seq: int, query: str) -> bool:
        """Returns True when the response was applied, False when discarded"""
        try:
            results = self.client.search(query)
        except ApiError as e:
            if self._is_latest(seq):
                self.error = e.message
            return False

        if not self._is_latest(seq):
            logger.debug(f"Discarding stale search #{seq} for {query!r}")
            return False
        self.results = results
        self.error = None
        return True

    def select_result(self, candidate: Dict) -> Dict:
        """Bind the draft to a search hit and merge its details"""
        self._debouncer.cancel()
        self._next_seq()  # in-flight searches are now stale

        media_type = candidate.get("mediaType", "movie")
        try:
            details = self.client.details(candidate["id"], media_type)
        except ApiError as e:
            self.error = e.message
            raise

        self.selected = candidate
        self.results = []
        self.error = None
        self.draft.title = candidate.get("name") or self.draft.title
        self.draft.type = "show" if media_type == "tv" else "movie"
        self.draft.tmdb = {key: details.get(key) for key in TMDB_FIELDS if details.get(key) is not None}
        if self.draft.type == "show" and not self.draft.total_seasons.strip():
            seasons = details.get("tmdbTvNumberOfSeasons")
            if seasons is not None:
                self.draft.total_seasons = str(seasons)
        return details

    # ==================== SUBMIT ====================

    def reset(self) -> None:
        self._debouncer.cancel()
        self._next_seq()
        self.draft = WatchItemDraft()
        self.results = []
        self.selected = None

    def submit(self) -> Optional[Dict]:
        """
        Validate and save the draft.
        Returns the saved row, or None with ``error`` set.
        """
        self.error = None
        try:
            payload = self.draft.to_payload()
        except DraftValidationError as e:
            self.error = str(e)
            return None

        try:
            if self.is_editing:
                saved = self.client.update_item(self.editing_id, payload)
            else:
                saved = self.client.create_item(payload)
        except ApiError as e:
            self.error = e.message
            return None

        self.last_saved = saved
        if self.is_editing:
            self.closed = True
        else:
            self.reset()
        if self.on_saved:
            self.on_saved(saved)
        return saved

    def close(self) -> None:
        self._debouncer.cancel()
        self.closed = True
