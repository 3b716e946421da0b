"""
Admin Routes
Aggregate user statistics for the administrative view

All endpoints require a User row with role=admin (see require_admin)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from watchtrack.database import get_db
from watchtrack.utils.dependencies import require_admin
from watchtrack.models.user import User
from watchtrack.schemas.auth import AdminUserSummary
from watchtrack.services.user_service import UserService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/users", response_model=List[AdminUserSummary])
def list_users(
    sortBy: str = Query("createdAt", description="createdAt, itemCount, sessionCount or lastSignInAt"),
    sortDir: str = Query("desc", description="asc or desc"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    List every known user with aggregate counts

    Returns per user:
    - Number of watch items and newest item date
    - Number of recorded sessions and newest sign-in

    **Requires role=admin**
    """
    return UserService.list_user_summaries(db, sortBy, sortDir)
