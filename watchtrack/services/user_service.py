from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from typing import List, Set
import os
import logging

from watchtrack.database import utcnow
from watchtrack.models.user import User, UserRole
from watchtrack.models.user_session import UserSession
from watchtrack.models.watch_item import WatchItem
from watchtrack.schemas.auth import Identity, AdminUserSummary

logger = logging.getLogger(__name__)

ADMIN_SORT_FIELDS = ["createdAt", "itemCount", "sessionCount", "lastSignInAt"]


def bootstrap_admin_ids() -> Set[str]:
    """User ids promoted to admin when their row is first created"""
    raw = os.getenv("ADMIN_USER_IDS", "")
    return {part.strip() for part in raw.split(",") if part.strip()}


class UserService:
    """Service for identity mirroring and sign-in bookkeeping"""

    @staticmethod
    def ensure_user(db: Session, identity: Identity) -> User:
        """Return the caller's User row, creating it on first sight"""
        user = db.get(User, identity.user_id)
        if user:
            return user

        role = UserRole.ADMIN if identity.user_id in bootstrap_admin_ids() else UserRole.USER
        user = User(
            id=identity.user_id,
            email=identity.email,
            role=role.value,
            created_at=utcnow()
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request created the row first
            db.rollback()
            user = db.get(User, identity.user_id)
            if user is None:
                raise
            return user

        db.refresh(user)
        logger.info(f"Created user {user.id} ({user.email}) with role {user.role}")
        return user

    @staticmethod
    def record_session(db: Session, identity: Identity) -> UserSession:
        """Append one sign-in event for the caller"""
        UserService.ensure_user(db, identity)
        session_row = UserSession(user_id=identity.user_id, created_at=utcnow())
        db.add(session_row)
        db.commit()
        db.refresh(session_row)
        logger.info(f"Recorded session {session_row.id} for user {identity.user_id}")
        return session_row

    @staticmethod
    def set_role(db: Session, user_id: str, role: UserRole) -> User:
        user = db.get(User, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        user.role = role.value  # type: ignore
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def list_user_summaries(
        db: Session,
        sort_by: str = "createdAt",
        sort_dir: str = "desc"
    ) -> List[AdminUserSummary]:
        """
        Aggregate item and session counts per user.

        Args:
            sort_by: one of ADMIN_SORT_FIELDS
            sort_dir: "asc" or "desc"
        """
        if sort_by not in ADMIN_SORT_FIELDS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid sortBy. Must be one of: {', '.join(ADMIN_SORT_FIELDS)}"
            )
        if sort_dir not in ("asc", "desc"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid sortDir. Must be 'asc' or 'desc'"
            )

        item_stats = dict(
            (row.user_id, (row.item_count, row.last_item_added_at))
            for row in db.query(
                WatchItem.user_id,
                func.count(WatchItem.id).label("item_count"),
                func.max(WatchItem.created_at).label("last_item_added_at")
            ).group_by(WatchItem.user_id)
        )
        session_stats = dict(
            (row.user_id, (row.session_count, row.last_sign_in_at))
            for row in db.query(
                UserSession.user_id,
                func.count(UserSession.id).label("session_count"),
                func.max(UserSession.created_at).label("last_sign_in_at")
            ).group_by(UserSession.user_id)
        )

        summaries = []
        for user in db.query(User).all():
            item_count, last_item_added_at = item_stats.get(user.id, (0, None))
            session_count, last_sign_in_at = session_stats.get(user.id, (0, None))
            summaries.append(AdminUserSummary(
                id=user.id,
                email=user.email,
                role=user.role,
                item_count=item_count,
                session_count=session_count,
                created_at=user.created_at,
                last_sign_in_at=last_sign_in_at,
                last_item_added_at=last_item_added_at
            ))

        attr = {
            "createdAt": "created_at",
            "itemCount": "item_count",
            "sessionCount": "session_count",
            "lastSignInAt": "last_sign_in_at",
        }[sort_by]

        # Missing timestamps sort as oldest, matching the admin page
        def sort_key(summary: AdminUserSummary):
            value = getattr(summary, attr)
            if value is None:
                return (0, 0)
            if hasattr(value, "timestamp"):
                return (1, value.replace(tzinfo=None).timestamp())
            return (1, value)

        summaries.sort(key=sort_key, reverse=(sort_dir == "desc"))
        return summaries
