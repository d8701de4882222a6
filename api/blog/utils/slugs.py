"""Slug generation and uniqueness utilities."""

from __future__ import annotations

from sqlalchemy.orm import Session

from .. import models

# Characters dropped from titles. Anything else (including non-Latin scripts)
# passes through unchanged.
STRIPPED_CHARACTERS = "!?.,"


def generate_slug(title: str) -> str:
    """
    Derive a URL slug from a title.

    Lowercases, turns spaces into hyphens and strips ``!?.,``.
    Example: "Hello World!" -> "hello-world"
    """
    slug = title.lower().replace(" ", "-")
    for char in STRIPPED_CHARACTERS:
        slug = slug.replace(char, "")
    return slug


def is_slug_taken(db: Session, slug: str, exclude_post_id: int | None = None) -> bool:
    """
    Check if a live post already uses a slug.

    Args:
        db: Database session
        slug: Slug to check
        exclude_post_id: Post whose own row is ignored (for updates)
    """
    query = models.live_query(db, models.Post, models.Post.id).filter(models.Post.slug == slug)
    if exclude_post_id is not None:
        query = query.filter(models.Post.id != exclude_post_id)
    return db.query(query.exists()).scalar()


def generate_unique_slug(db: Session, title: str, exclude_post_id: int | None = None) -> str:
    """
    Derive a slug from a title and make it unique among live posts.

    On collision, appends -1, -2, ... checking one candidate at a time.
    """
    base_slug = generate_slug(title)
    if not is_slug_taken(db, base_slug, exclude_post_id):
        return base_slug

    counter = 1
    while is_slug_taken(db, f"{base_slug}-{counter}", exclude_post_id):
        counter += 1
    return f"{base_slug}-{counter}"
