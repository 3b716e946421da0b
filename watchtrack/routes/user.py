from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from watchtrack.database import get_db
from watchtrack.schemas.auth import Identity, UserResponse, SuccessResponse
from watchtrack.services.user_service import UserService
from watchtrack.utils.dependencies import get_current_identity

# Define routers
router = APIRouter(prefix="/api/user", tags=["User"])
session_router = APIRouter(prefix="/api/session", tags=["User"])


# Mirror the authenticated identity into the users table
@router.post("/sync", response_model=UserResponse)
def sync_user(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Create the caller's User row if missing and return it"""
    return UserService.ensure_user(db, identity)


# Called once by the frontend after each successful sign-in
@session_router.post("", response_model=SuccessResponse)
def record_session(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Append a sign-in event for the caller"""
    UserService.record_session(db, identity)
    return {"success": True}
