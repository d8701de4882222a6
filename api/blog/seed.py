"""Development seed data: an admin account, starter categories and tags."""

from __future__ import annotations

import logging

from passlib.context import CryptContext

from . import models
from .db import SessionLocal
from .settings import SEED_ADMIN_PASSWORD

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SEED_CATEGORIES = [
    {"name": "Tech", "slug": "tech", "description": "Python, databases and other technical posts", "display_order": 1},
    {"name": "Daily", "slug": "daily", "description": "Everyday stories and thoughts", "display_order": 2},
]

SEED_TAGS = [
    {"name": "Python", "slug": "python"},
    {"name": "FastAPI", "slug": "fastapi"},
    {"name": "PostgreSQL", "slug": "postgresql"},
]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def ensure_seed_data() -> None:
    """
    Insert seed rows that are missing. Safe to run repeatedly.

    Rows are matched by username (users) or slug (categories, tags).
    """
    db = SessionLocal()
    try:
        created = 0

        admin = models.live_query(db, models.User).filter(models.User.username == "admin").first()
        if admin is None:
            db.add(
                models.User(
                    email="admin@blog.local",
                    username="admin",
                    password_hash=hash_password(SEED_ADMIN_PASSWORD),
                    role=models.UserRole.ADMIN.value,
                )
            )
            created += 1

        existing_categories = {slug for (slug,) in db.query(models.Category.slug).all()}
        for category in SEED_CATEGORIES:
            if category["slug"] not in existing_categories:
                db.add(models.Category(**category))
                created += 1

        existing_tags = {slug for (slug,) in db.query(models.Tag.slug).all()}
        for tag in SEED_TAGS:
            if tag["slug"] not in existing_tags:
                db.add(models.Tag(**tag))
                created += 1

        db.commit()
        logger.info(f"ensure_seed_data: {created} row(s) created.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level="INFO")
    ensure_seed_data()
