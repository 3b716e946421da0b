"""
Import all models to ensure they are registered with SQLAlchemy
"""
from watchtrack.models.user import User, UserRole
from watchtrack.models.watch_item import WatchItem, WatchItemType, WatchStatus, WatchRating
from watchtrack.models.user_session import UserSession

__all__ = [
    "User",
    "UserRole",
    "WatchItem",
    "WatchItemType",
    "WatchStatus",
    "WatchRating",
    "UserSession"
]
