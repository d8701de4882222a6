"""Test the post query and mutation services directly."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog import models, schemas
from blog.errors import InvalidPaginationError, PostPermissionError
from blog.services import post_mutation, post_query

from .conftest import unique_name


def _payload(**fields) -> schemas.PostCreate:
    data = {"title": unique_name("Service Post"), "content": "one two three"}
    data.update(fields)
    return schemas.PostCreate(**data)


@pytest.mark.parametrize(
    "content, minutes",
    [
        ("a b c d", 1),
        ("", 1),
        (" ".join(["w"] * 399), 1),
        (" ".join(["w"] * 400), 2),
        (" ".join(["w"] * 1000), 5),
    ],
)
def test_calculate_reading_time(content, minutes):
    assert post_mutation.calculate_reading_time(content) == minutes


@pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0), (1, 101), (-1, 10)])
def test_list_posts_rejects_paging_before_querying(page, page_size):
    # No session at all: validation must fail before storage is touched
    with pytest.raises(InvalidPaginationError):
        post_query.list_posts(None, page=page, page_size=page_size)


def test_list_posts_past_last_page_is_empty(db: Session, make_user, make_category):
    user = make_user()
    category = make_category()
    post_mutation.create_post(db, _payload(category_id=category.id), user.id)

    result = post_query.list_posts(db, page=5, page_size=10, category_id=category.id)

    assert result.items == []
    assert result.pagination.total_items == 1
    assert result.pagination.total_pages == 1
    assert result.pagination.has_next is False
    assert result.pagination.has_previous is True


def test_create_post_attaches_author_and_tags(db: Session, make_user, make_tag):
    user = make_user()
    tag = make_tag()

    post = post_mutation.create_post(db, _payload(tag_ids=[tag.id, tag.id]), user.id)

    assert post.author.id == user.id
    assert [t.id for t in post.tags] == [tag.id]
    assert db.query(models.PostTag).filter(models.PostTag.post_id == post.id).count() == 1


def test_update_post_by_non_owner_leaves_post_unmodified(db: Session, make_user):
    owner = make_user()
    intruder = make_user()
    post = post_mutation.create_post(db, _payload(), owner.id)

    with pytest.raises(PostPermissionError):
        post_mutation.update_post(
            db, post.id, schemas.PostUpdate(title="Changed", content="Changed"), intruder.id
        )
    db.rollback()

    unchanged = post_query.get_post_by_id(db, post.id)
    assert unchanged.title == post.title
    assert unchanged.content == post.content
    assert unchanged.slug == post.slug


def test_update_and_delete_missing_post(db: Session, make_user):
    user = make_user()
    payload = schemas.PostUpdate(title="Nothing", content="Nothing")

    assert post_mutation.update_post(db, 999999999, payload, user.id) is None
    assert post_mutation.delete_post(db, 999999999, user.id) is False


def test_update_deleted_post_is_not_found(db: Session, make_user):
    user = make_user()
    post = post_mutation.create_post(db, _payload(), user.id)
    post_mutation.delete_post(db, post.id, user.id)

    payload = schemas.PostUpdate(title=post.title, content="revived?")
    assert post_mutation.update_post(db, post.id, payload, user.id) is None


def test_delete_keeps_row_and_tag_associations(db: Session, make_user, make_tag):
    user = make_user()
    tag = make_tag()
    post = post_mutation.create_post(db, _payload(tag_ids=[tag.id]), user.id)

    assert post_mutation.delete_post(db, post.id, user.id) is True

    assert post_query.get_post_by_id(db, post.id) is None
    assert post_query.get_post_by_slug(db, post.slug) is None
    row = db.get(models.Post, post.id)
    assert row.deleted_at is not None
    assert db.query(models.PostTag).filter(models.PostTag.post_id == post.id).count() == 1


def test_deleted_posts_are_excluded_from_listing(db: Session, make_user, make_category):
    user = make_user()
    category = make_category()
    kept = post_mutation.create_post(db, _payload(category_id=category.id), user.id)
    gone = post_mutation.create_post(db, _payload(category_id=category.id), user.id)
    post_mutation.delete_post(db, gone.id, user.id)

    result = post_query.list_posts(db, category_id=category.id)

    assert [item.id for item in result.items] == [kept.id]
    assert result.pagination.total_items == 1


def test_increment_view_count(db: Session, make_user):
    user = make_user()
    post = post_mutation.create_post(db, _payload(), user.id)

    post_mutation.increment_view_count(db, post.id)
    post_mutation.increment_view_count(db, post.id)

    db.expire_all()
    assert db.get(models.Post, post.id).view_count == 2


def test_increment_view_count_missing_or_deleted_is_noop(db: Session, make_user):
    user = make_user()
    post = post_mutation.create_post(db, _payload(), user.id)
    post_mutation.delete_post(db, post.id, user.id)

    post_mutation.increment_view_count(db, 999999999)
    post_mutation.increment_view_count(db, post.id)

    db.expire_all()
    assert db.get(models.Post, post.id).view_count == 0


# ============================================================================
# SLUG CONFLICT RETRY
# ============================================================================


def _stale_slug_generator(monkeypatch, stale_slug: str, stale_calls: int) -> list[str]:
    """Make the first stale_calls slug lookups miss a slug that is already taken."""
    real = post_mutation.generate_unique_slug
    issued: list[str] = []

    def fake(db, title, exclude_post_id=None):
        slug = stale_slug if len(issued) < stale_calls else real(db, title, exclude_post_id)
        issued.append(slug)
        return slug

    monkeypatch.setattr(post_mutation, "generate_unique_slug", fake)
    return issued


def test_create_post_retries_after_losing_slug_race(db: Session, make_user, monkeypatch):
    user = make_user()
    title = unique_name("Race")
    winner = post_mutation.create_post(db, _payload(title=title), user.id)

    issued = _stale_slug_generator(monkeypatch, winner.slug, stale_calls=1)
    loser = post_mutation.create_post(db, _payload(title=title), user.id)

    assert issued == [winner.slug, f"{winner.slug}-1"]
    assert loser.slug == f"{winner.slug}-1"


def test_create_post_gives_up_after_retry_limit(db: Session, make_user, monkeypatch):
    user = make_user()
    title = unique_name("Race")
    winner = post_mutation.create_post(db, _payload(title=title), user.id)

    monkeypatch.setattr(post_mutation, "SLUG_RETRY_ATTEMPTS", 2)
    issued = _stale_slug_generator(monkeypatch, winner.slug, stale_calls=10)

    with pytest.raises(IntegrityError):
        post_mutation.create_post(db, _payload(title=title), user.id)
    assert len(issued) == 2
