"""
Client-side controllers driving the WatchTrack HTTP API
"""
from .api import ApiError, WatchTrackClient
from .form import Debouncer, DraftValidationError, WatchItemDraft, WatchItemFormController
from .watchlist import FilterStore, WatchlistFilters, WatchlistListController

__all__ = [
    "ApiError",
    "WatchTrackClient",
    "Debouncer",
    "DraftValidationError",
    "WatchItemDraft",
    "WatchItemFormController",
    "FilterStore",
    "WatchlistFilters",
    "WatchlistListController"
]
