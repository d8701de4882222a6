"""
Post read paths: filtered listing and single-post lookups.

Everything here is read-only. The view-count side effect of a successful
lookup is scheduled by the caller (see utils/view_tracking.py).
"""

from __future__ import annotations

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from .. import models, schemas
from ..pagination import apply_offset, build_pagination, validate_page_params
from ..settings import DEFAULT_PAGE_SIZE


_DETAIL_LOADS = (
    joinedload(models.Post.author),
    joinedload(models.Post.category),
    selectinload(models.Post.tags),
)


def _post_query(db: Session) -> Query:
    """Live posts with author, category and tags eagerly loaded."""
    return models.live_query(db, models.Post).options(*_DETAIL_LOADS)


def list_posts(
    db: Session,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    status: models.PostStatus | None = None,
    category_id: int | None = None,
    tag_id: int | None = None,
    search_query: str | None = None,
) -> schemas.PaginatedResponse[schemas.PostListItem]:
    """
    List live posts, newest first, with optional AND-combined filters.

    Args:
        db: Database session
        page: 1-based page number
        page_size: Items per page (1..MAX_PAGE_SIZE)
        status: Exact status match
        category_id: Exact category match
        tag_id: Post has at least one association with this tag
        search_query: Case-sensitive substring of title or content

    Raises:
        InvalidPaginationError: if page/page_size are out of range
    """
    validate_page_params(page, page_size)

    query = models.live_query(db, models.Post)

    if status is not None:
        query = query.filter(models.Post.status == models.PostStatus(status).value)

    if category_id is not None:
        query = query.filter(models.Post.category_id == category_id)

    if tag_id is not None:
        query = query.filter(models.Post.post_tags.any(models.PostTag.tag_id == tag_id))

    if search_query:
        query = query.filter(
            models.Post.title.contains(search_query, autoescape=True)
            | models.Post.content.contains(search_query, autoescape=True)
        )

    total_items = query.count()

    query = query.options(*_DETAIL_LOADS)
    # id breaks ties between equal timestamps in insertion order
    query = query.order_by(models.Post.created_at.desc(), models.Post.id.asc())
    posts = apply_offset(query, page, page_size).all()

    return schemas.PaginatedResponse[schemas.PostListItem](
        items=[schemas.PostListItem.model_validate(post) for post in posts],
        pagination=build_pagination(page, page_size, total_items),
    )


def get_post_by_id(db: Session, post_id: int) -> schemas.PostDetail | None:
    """Get a live post by id, or None."""
    post = _post_query(db).filter(models.Post.id == post_id).first()
    if post is None:
        return None
    return schemas.PostDetail.model_validate(post)


def get_post_by_slug(db: Session, slug: str) -> schemas.PostDetail | None:
    """Get a live post by slug, or None."""
    post = _post_query(db).filter(models.Post.slug == slug).first()
    if post is None:
        return None
    return schemas.PostDetail.model_validate(post)
