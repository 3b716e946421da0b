"""
Grant or revoke the admin role

Usage:
    python -m watchtrack.migrations.set_user_role <user_id> admin
    python -m watchtrack.migrations.set_user_role <user_id> user
"""

import argparse

from watchtrack.database import get_db_session
from watchtrack.models.user import UserRole
from watchtrack.services.user_service import UserService


def main(argv=None):
    parser = argparse.ArgumentParser(description="Set a user's role")
    parser.add_argument("user_id", help="Auth provider user id")
    parser.add_argument("role", choices=[r.value for r in UserRole])
    args = parser.parse_args(argv)

    db = get_db_session()
    try:
        user = UserService.set_role(db, args.user_id, UserRole(args.role))
        print(f"✅ {user.email or user.id} is now '{user.role}'")
    except Exception as e:
        db.rollback()
        print(f"❌ Could not set role: {getattr(e, 'detail', e)}")
        raise SystemExit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
