"""
Print watch items, newest update first

Usage:
    python -m watchtrack.migrations.list_watch_items [user_id]
"""

import argparse

from watchtrack.database import get_db_session
from watchtrack.models.watch_item import WatchItem


def main(argv=None):
    parser = argparse.ArgumentParser(description="List watch items")
    parser.add_argument("user_id", nargs="?", help="Only this user's items")
    args = parser.parse_args(argv)

    db = get_db_session()
    try:
        query = db.query(WatchItem)
        if args.user_id:
            query = query.filter(WatchItem.user_id == args.user_id)
        items = query.order_by(WatchItem.updated_at.desc()).all()

        if not items:
            print("No watch items found.")
            return

        print(f"{'id':>6}  {'tmdb_id':>8}  {'user_id':<36}  {'updated_at':<26}  title")
        for item in items:
            print(f"{item.id:>6}  {str(item.tmdb_id or ''):>8}  {item.user_id:<36}  "
                  f"{item.updated_at.isoformat():<26}  {item.title}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
