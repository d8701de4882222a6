from __future__ import annotations

import os
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Generator

# Configure before the application modules read the environment.
_TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="blog-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_PATH}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["ENVIRONMENT"] = "test"
os.environ["SEED_DATA"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from blog import models  # noqa: E402
from blog.auth import create_access_token  # noqa: E402
from blog.db import SessionLocal  # noqa: E402
from blog.main import app, run_startup_tasks  # noqa: E402


def unique_name(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


@pytest.fixture(scope="session", autouse=True)
def bootstrap() -> None:
    run_startup_tasks()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Create a database session for testing."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def make_user(db: Session) -> Callable[..., models.User]:
    """Factory for committed users with unique names."""

    def _make_user(role: models.UserRole = models.UserRole.USER) -> models.User:
        username = unique_name("user")
        user = models.User(
            email=f"{username}@example.com",
            username=username,
            password_hash="not-a-real-hash",
            role=role.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_category(db: Session) -> Callable[..., models.Category]:
    def _make_category() -> models.Category:
        slug = unique_name("cat")
        category = models.Category(name=slug.title(), slug=slug)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make_category


@pytest.fixture()
def make_tag(db: Session) -> Callable[..., models.Tag]:
    def _make_tag() -> models.Tag:
        slug = unique_name("tag")
        tag = models.Tag(name=slug.title(), slug=slug)
        db.add(tag)
        db.commit()
        db.refresh(tag)
        return tag

    return _make_tag


@pytest.fixture()
def auth_headers() -> Callable[[models.User], dict[str, str]]:
    """Build a Bearer Authorization header for a user."""

    def _auth_headers(user: models.User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
