"""Seed the database with the default dashboard users.

Runs on app startup (only when the users table is empty) and backs the
admin "reset users" action. Run manually to wipe and reseed:
    python seed.py --reset
"""
import sys
from typing import Optional

from sqlalchemy.orm import Session

from config import config
from database import SessionLocal, init_db
from logger import get_logger
from models import DashboardSettings, User, UserSession
from sessions import hash_password

logger = get_logger(__name__)

# (username, display name, role)
DEFAULT_USERS = [
    ("admin", "Admin User", "admin"),
    ("manager", "Restaurant Manager", "manager"),
    ("chef", "Head Chef", "staff"),
    ("waiter", "Senior Waiter", "staff"),
]


def seed_default_users(db: Optional[Session] = None, reset: bool = False) -> int:
    """Create the default users. With reset, every existing user is removed first.

    Returns the number of users created (0 when users already exist and
    reset is False).
    """
    close_db = False
    if db is None:
        db = SessionLocal()
        close_db = True

    try:
        if reset:
            db.query(UserSession).delete()
            db.query(DashboardSettings).delete()
            db.query(User).delete()
        elif db.query(User).count() > 0:
            return 0

        for username, name, role in DEFAULT_USERS:
            db.add(User(
                username=username,
                name=name,
                role=role,
                password_hash=hash_password(config.DEFAULT_USER_PASSWORD),
            ))
        db.commit()
        logger.info(f"Seeded {len(DEFAULT_USERS)} default users")
        return len(DEFAULT_USERS)

    except Exception as e:
        logger.error(f"Error seeding users: {e}")
        db.rollback()
        raise
    finally:
        if close_db:
            db.close()


if __name__ == "__main__":
    init_db()
    created = seed_default_users(reset="--reset" in sys.argv)
    print(f"Created {created} users")
