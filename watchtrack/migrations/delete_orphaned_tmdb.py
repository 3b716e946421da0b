"""
Delete every watch item pointing at one TMDB id, across all users.
Used when TMDB removes a title.

Usage:
    python -m watchtrack.migrations.delete_orphaned_tmdb <tmdb_id>
"""

import argparse
from sqlalchemy.orm import Session

from watchtrack.database import get_db_session
from watchtrack.models.watch_item import WatchItem


def delete_orphaned(db: Session, tmdb_id: int) -> int:
    """Remove all items for ``tmdb_id``; returns how many were deleted"""
    deleted = db.query(WatchItem).filter(WatchItem.tmdb_id == tmdb_id).delete()
    db.commit()
    return deleted


def main(argv=None):
    parser = argparse.ArgumentParser(description="Delete items for a removed TMDB title")
    parser.add_argument("tmdb_id", type=int)
    args = parser.parse_args(argv)

    db = get_db_session()
    try:
        deleted = delete_orphaned(db, args.tmdb_id)
        print(f"Deleted {deleted} orphaned watch item(s) with tmdb_id={args.tmdb_id}")
    except Exception as e:
        db.rollback()
        print(f"❌ Error deleting items: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
