"""Test fire-and-forget view counting."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from blog import models, schemas
from blog.services import post_mutation
from blog.utils.view_tracking import record_post_view

from .conftest import unique_name


def test_record_post_view_increments_once(db: Session, make_user):
    user = make_user()
    post = post_mutation.create_post(
        db, schemas.PostCreate(title=unique_name("Viewed"), content="x"), user.id
    )

    record_post_view(post.id)

    db.expire_all()
    assert db.get(models.Post, post.id).view_count == 1


def test_record_post_view_missing_post_is_silent():
    record_post_view(999999999)


def test_record_post_view_swallows_failures(monkeypatch, caplog):
    def broken(db, post_id):
        raise RuntimeError("database went away")

    monkeypatch.setattr(post_mutation, "increment_view_count", broken)

    with caplog.at_level(logging.WARNING, logger="blog.utils.view_tracking"):
        record_post_view(42)

    assert "Failed to record view for post 42" in caplog.text
