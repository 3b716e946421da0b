from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Union

from watchtrack.database import get_db
from watchtrack.utils.dependencies import get_current_identity
from watchtrack.schemas.auth import Identity, SuccessResponse
from watchtrack.schemas.validation import parse_id
from watchtrack.schemas.watchlist import (
    WatchItemCreate,
    WatchItemUpdate,
    WatchItemResponse
)
from watchtrack.services.watchlist_service import WatchlistService

router = APIRouter(prefix="/api/watchlist", tags=["Watchlist"])


def require_item_id(raw: Optional[str]) -> int:
    """Helper to turn the ?id= query value into an int or answer 400"""
    if raw is None or raw == "":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing item ID")
    try:
        return parse_id(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid item ID")


# ==================== WATCHLIST ENDPOINTS ====================

@router.get("", response_model=Union[WatchItemResponse, List[WatchItemResponse]])
def get_watchlist(
    id: Optional[str] = Query(None, description="Return only this item"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """
    Get the caller's watchlist, most recently updated first

    - **id**: optional item id; returns that single item when owned
    """
    if id is not None:
        return WatchlistService.get_item(db, identity.user_id, require_item_id(id))
    return WatchlistService.list_items(db, identity.user_id)


@router.post("", response_model=WatchItemResponse, status_code=status.HTTP_201_CREATED)
def create_watch_item(
    item_data: WatchItemCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """
    Add a title to the caller's watchlist

    - **title**, **type**, **status**: required
    - **tmdb\\***: optional snapshot copied from the TMDB details endpoint
    """
    return WatchlistService.create_item(db, identity, item_data)


@router.put("", response_model=WatchItemResponse)
def update_watch_item(
    update_data: WatchItemUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """
    Update an owned item; omitted fields are left untouched

    - **id**: target item (required)
    """
    return WatchlistService.update_item(db, identity.user_id, update_data)


@router.delete("", response_model=SuccessResponse)
def delete_watch_item(
    id: Optional[str] = Query(None, description="Item to delete"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Remove an owned item"""
    WatchlistService.delete_item(db, identity.user_id, require_item_id(id))
    return {"success": True}
