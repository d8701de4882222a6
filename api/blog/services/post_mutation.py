"""
Post write paths: create, update, soft delete and view counting.

Slugs are claimed check-then-insert. The partial unique index on live slugs
is the final arbiter: a write that loses a race is rolled back and retried
with a freshly computed slug.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import require_ownership
from ..settings import SLUG_RETRY_ATTEMPTS, WORDS_PER_MINUTE
from ..utils.slugs import generate_unique_slug, is_slug_taken
from .post_query import get_post_by_id

logger = logging.getLogger(__name__)


def calculate_reading_time(content: str) -> int:
    """Whole minutes to read content at WORDS_PER_MINUTE, never less than 1."""
    word_count = len(content.split())
    return max(1, word_count // WORDS_PER_MINUTE)


def _unique_tag_ids(tag_ids: list[int]) -> list[int]:
    return list(dict.fromkeys(tag_ids))


def _flush_with_slug_retry(db: Session, prepare: Callable[[], models.Post]) -> models.Post:
    """
    Run prepare() and flush, retrying when a concurrent writer took the slug.

    prepare() must (re)apply every change to the post, including its slug,
    since a rollback discards them. Integrity errors unrelated to the slug
    are re-raised.
    """
    attempt = 1
    while True:
        post = prepare()
        slug, post_id = post.slug, post.id
        try:
            db.flush()
            return post
        except IntegrityError:
            db.rollback()
            if attempt >= SLUG_RETRY_ATTEMPTS or not is_slug_taken(db, slug, exclude_post_id=post_id):
                raise
            logger.warning(
                f"Slug '{slug}' was claimed concurrently (attempt {attempt}/{SLUG_RETRY_ATTEMPTS}), retrying"
            )
            attempt += 1


def _replace_tags(db: Session, post: models.Post, tag_ids: list[int]) -> None:
    """Delete every tag association of the post, then insert the given ones."""
    if post.post_tags:
        post.post_tags.clear()
        # Deletes must reach the database before re-inserting the same keys
        db.flush()
    post.post_tags.extend(models.PostTag(tag_id=tag_id) for tag_id in _unique_tag_ids(tag_ids))


def create_post(db: Session, payload: schemas.PostCreate, author_id: int) -> schemas.PostDetail:
    """
    Create a post owned by author_id.

    Derives the slug and reading time, stamps published_at when created as
    Published, then attaches the requested tags once the post has an id.
    """
    post = models.Post(user_id=author_id)

    def prepare() -> models.Post:
        now = models.utcnow()
        post.slug = generate_unique_slug(db, payload.title)
        post.category_id = payload.category_id
        post.title = payload.title
        post.content = payload.content
        post.summary = payload.summary
        post.thumbnail_url = payload.thumbnail_url
        post.reading_time_minutes = calculate_reading_time(payload.content)
        post.seo_keywords = payload.seo_keywords
        post.meta_description = payload.meta_description
        post.status = payload.status.value
        post.is_featured = payload.is_featured
        post.created_at = now
        post.updated_at = now
        post.published_at = now if payload.status == models.PostStatus.PUBLISHED else None
        db.add(post)
        return post

    _flush_with_slug_retry(db, prepare)

    if payload.tag_ids:
        _replace_tags(db, post, payload.tag_ids)

    db.commit()
    logger.info(f"Created post {post.id} ('{post.slug}') for user {author_id}")

    return get_post_by_id(db, post.id)


def update_post(
    db: Session, post_id: int, payload: schemas.PostUpdate, user_id: int
) -> schemas.PostDetail | None:
    """
    Overwrite a post's mutable fields. Owner only.

    Returns None if the post does not exist.

    Raises:
        PostPermissionError: if user_id is not the post's owner
    """
    post = models.live_query(db, models.Post).filter(models.Post.id == post_id).first()
    if post is None:
        return None

    require_ownership(post.user_id, user_id)

    def prepare() -> models.Post:
        now = models.utcnow()
        if post.title != payload.title:
            post.slug = generate_unique_slug(db, payload.title, exclude_post_id=post.id)

        post.reading_time_minutes = calculate_reading_time(payload.content)

        post.title = payload.title
        post.content = payload.content
        post.summary = payload.summary
        post.category_id = payload.category_id
        post.thumbnail_url = payload.thumbnail_url
        post.seo_keywords = payload.seo_keywords
        post.meta_description = payload.meta_description
        post.is_featured = payload.is_featured
        post.updated_at = now

        if post.status != payload.status.value:
            post.status = payload.status.value
            # published_at is set once and survives later status changes
            if payload.status == models.PostStatus.PUBLISHED and post.published_at is None:
                post.published_at = now
        return post

    _flush_with_slug_retry(db, prepare)
    _replace_tags(db, post, payload.tag_ids)

    db.commit()
    logger.info(f"Updated post {post.id} by user {user_id}")

    return get_post_by_id(db, post.id)


def delete_post(db: Session, post_id: int, user_id: int) -> bool:
    """
    Soft-delete a post. Owner only.

    Returns False if the post does not exist. The row and its tag
    associations stay in place.

    Raises:
        PostPermissionError: if user_id is not the post's owner
    """
    post = models.live_query(db, models.Post).filter(models.Post.id == post_id).first()
    if post is None:
        return False

    require_ownership(post.user_id, user_id)

    post.soft_delete()
    db.commit()
    logger.info(f"Deleted post {post_id} by user {user_id}")
    return True


def increment_view_count(db: Session, post_id: int) -> None:
    """
    Atomically add one to a live post's view counter.

    A missing or deleted post is a silent no-op.
    """
    db.query(models.Post).filter(
        models.Post.id == post_id,
        models.Post.live_rows(),
    ).update(
        {models.Post.view_count: models.Post.view_count + 1},
        synchronize_session=False,
    )
    db.commit()
