"""
Migration: move stored watch items onto the fixed vocabulary

Older rows may carry plan_to_watch/completed statuses and 1-5 numeric
ratings. This rewrites them in place:
    status: plan_to_watch -> want-to-watch, completed -> finished
    rating: >=4 -> loved, 3 -> liked, <=2 -> not-for-me

Usage:
    python -m watchtrack.migrations.migrate_status_vocabulary [--dry-run]
"""

import argparse
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from watchtrack.database import get_db_session
from watchtrack.models.watch_item import WatchItem, WatchStatus, WatchRating

LEGACY_STATUSES = {
    "plan_to_watch": WatchStatus.WANT_TO_WATCH.value,
    "completed": WatchStatus.FINISHED.value,
}


def map_status(value: Optional[str]) -> Optional[str]:
    """Return the fixed-vocabulary status, or None when the value is unknown"""
    if value in {s.value for s in WatchStatus}:
        return value
    return LEGACY_STATUSES.get(value)


def map_rating(value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Return (known, rating). Numeric ratings are folded into the three-way enum;
    unknown strings are reported as not known so they can be listed.
    """
    if value is None or value == "":
        return True, None
    if value in {r.value for r in WatchRating}:
        return True, value
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return False, None
    if score >= 4:
        return True, WatchRating.LOVED.value
    if score == 3:
        return True, WatchRating.LIKED.value
    return True, WatchRating.NOT_FOR_ME.value


def migrate(db: Session, dry_run: bool = False) -> dict:
    """Rewrite legacy values; returns counters for reporting"""
    stats = {"status_updated": 0, "rating_updated": 0, "unknown": 0}

    for item in db.query(WatchItem).all():
        new_status = map_status(item.status)
        if new_status is None:
            stats["unknown"] += 1
            print(f"   ⚠️  item {item.id}: unknown status {item.status!r} left as is")
        elif new_status != item.status:
            item.status = new_status  # type: ignore
            stats["status_updated"] += 1

        known, new_rating = map_rating(item.rating)
        if not known:
            stats["unknown"] += 1
            print(f"   ⚠️  item {item.id}: unknown rating {item.rating!r} left as is")
        elif new_rating != item.rating:
            item.rating = new_rating  # type: ignore
            stats["rating_updated"] += 1

    if dry_run:
        db.rollback()
    else:
        db.commit()
    return stats


def main():
    parser = argparse.ArgumentParser(description="Migrate legacy status/rating values")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    db = get_db_session()
    try:
        print("=" * 60)
        print("Migrating watch item status/rating vocabulary...")
        stats = migrate(db, dry_run=args.dry_run)
        print(f"   Statuses rewritten: {stats['status_updated']}")
        print(f"   Ratings rewritten:  {stats['rating_updated']}")
        print(f"   Unknown values:     {stats['unknown']}")
        if args.dry_run:
            print("   (dry run, nothing written)")
        print("=" * 60)
    except Exception as e:
        db.rollback()
        print(f"❌ Migration failed: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
