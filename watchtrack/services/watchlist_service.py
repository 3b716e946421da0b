from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from typing import List, Optional
import logging

from watchtrack.database import utcnow
from watchtrack.models.watch_item import WatchItem
from watchtrack.schemas.auth import Identity
from watchtrack.schemas.watchlist import WatchItemCreate, WatchItemUpdate
from watchtrack.services.user_service import UserService

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Item not found or unauthorized"
DUPLICATE_DETAIL = "This title is already in your watchlist"


class WatchlistService:
    """Service for watch item operations, always scoped to one owner"""

    @staticmethod
    def _ensure_tmdb_id_free(
        db: Session,
        user_id: str,
        tmdb_id: Optional[int],
        exclude_item_id: Optional[int] = None
    ) -> None:
        """Reject a second item for the same (user, tmdb title)"""
        if tmdb_id is None:
            return
        query = db.query(WatchItem.id).filter(
            WatchItem.user_id == user_id,
            WatchItem.tmdb_id == tmdb_id
        )
        if exclude_item_id is not None:
            query = query.filter(WatchItem.id != exclude_item_id)
        if query.first():
            logger.warning(f"Duplicate tmdb_id {tmdb_id} for user {user_id}")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)

    @staticmethod
    def _commit(db: Session) -> None:
        """Commit, turning a unique-constraint race into 409"""
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)

    @staticmethod
    def create_item(db: Session, identity: Identity, item_data: WatchItemCreate) -> WatchItem:
        """Add a title to the caller's watchlist, creating the User row on demand"""
        UserService.ensure_user(db, identity)
        WatchlistService._ensure_tmdb_id_free(db, identity.user_id, item_data.tmdb_id)

        now = utcnow()
        item = WatchItem(
            **item_data.model_dump(mode="json"),
            user_id=identity.user_id,
            created_at=now,
            updated_at=now
        )
        db.add(item)
        WatchlistService._commit(db)
        db.refresh(item)
        return item

    @staticmethod
    def list_items(db: Session, user_id: str) -> List[WatchItem]:
        """All items of the owner, most recently updated first"""
        return db.query(WatchItem).filter(
            WatchItem.user_id == user_id
        ).order_by(WatchItem.updated_at.desc(), WatchItem.id.desc()).all()

    @staticmethod
    def get_item(db: Session, user_id: str, item_id: int) -> WatchItem:
        """
        Get one item by id and owner.
        Missing and foreign items are reported identically.
        """
        item = db.query(WatchItem).filter(
            WatchItem.id == item_id,
            WatchItem.user_id == user_id
        ).first()

        if not item:
            logger.warning(f"Watch item {item_id} not found for user {user_id}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=NOT_FOUND_DETAIL
            )
        return item

    @staticmethod
    def update_item(db: Session, user_id: str, update_data: WatchItemUpdate) -> WatchItem:
        """Apply only the fields present in the payload and refresh updated_at"""
        item = WatchlistService.get_item(db, user_id, update_data.id)
        changes = update_data.changes()

        if "tmdb_id" in changes:
            WatchlistService._ensure_tmdb_id_free(db, user_id, changes["tmdb_id"], exclude_item_id=item.id)

        for field, value in changes.items():
            setattr(item, field, value)
        item.updated_at = utcnow()  # type: ignore

        WatchlistService._commit(db)
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, user_id: str, item_id: int) -> None:
        """Remove an owned item"""
        item = WatchlistService.get_item(db, user_id, item_id)
        db.delete(item)
        db.commit()
