"""Blog post endpoints."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..db import get_db
from ..errors import PostNotFoundError
from ..services import post_mutation, post_query
from ..settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..utils.view_tracking import record_post_view

router = APIRouter(prefix="/posts", tags=["Posts"])


def status_filter(status: str | None = Query(None)) -> models.PostStatus | None:
    """Parse the status filter. An empty value means no filter."""
    if not status:
        return None
    try:
        return models.PostStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in models.PostStatus)
        raise RequestValidationError(
            [
                {
                    "type": "enum",
                    "loc": ("query", "status"),
                    "msg": f"Input should be one of: {allowed}",
                    "input": status,
                }
            ]
        )


@router.get("", response_model=schemas.PaginatedResponse[schemas.PostListItem])
def list_posts(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
    status: models.PostStatus | None = Depends(status_filter),
    category_id: int | None = Query(None, alias="categoryId"),
    tag_id: int | None = Query(None, alias="tagId"),
    search_query: str | None = Query(None, alias="searchQuery"),
    db: Session = Depends(get_db),
) -> schemas.PaginatedResponse[schemas.PostListItem]:
    """
    List posts, newest first.

    Filters combine with AND:
    - status: exact status
    - categoryId: exact category
    - tagId: post carries this tag
    - searchQuery: case-sensitive substring of title or content
    """
    return post_query.list_posts(
        db,
        page=page,
        page_size=page_size,
        status=status,
        category_id=category_id,
        tag_id=tag_id,
        search_query=search_query,
    )


@router.get("/slug/{slug}", response_model=schemas.PostDetail)
def get_post_by_slug(
    slug: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> schemas.PostDetail:
    """Get a post by slug. Counts a view after responding."""
    post = post_query.get_post_by_slug(db, slug)
    if post is None:
        raise PostNotFoundError(f"Post '{slug}' not found")

    background_tasks.add_task(record_post_view, post.id)
    return post


@router.get("/{post_id}", response_model=schemas.PostDetail)
def get_post(
    post_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> schemas.PostDetail:
    """Get a post by id. Counts a view after responding."""
    post = post_query.get_post_by_id(db, post_id)
    if post is None:
        raise PostNotFoundError(f"Post {post_id} not found")

    background_tasks.add_task(record_post_view, post.id)
    return post


@router.post(
    "",
    response_model=schemas.PostDetail,
    status_code=status.HTTP_201_CREATED,
)
def create_post(
    payload: schemas.PostCreate,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.PostDetail:
    """Create a post authored by the current user."""
    post = post_mutation.create_post(db, payload, current_user.id)
    response.headers["Location"] = str(request.url_for("get_post", post_id=post.id))
    return post


@router.put("/{post_id}", response_model=schemas.PostDetail)
def update_post(
    post_id: int,
    payload: schemas.PostUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> schemas.PostDetail:
    """Replace a post's content, metadata and tags (owner only)."""
    post = post_mutation.update_post(db, post_id, payload, current_user.id)
    if post is None:
        raise PostNotFoundError(f"Post {post_id} not found")
    return post


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> None:
    """Soft-delete a post (owner only)."""
    if not post_mutation.delete_post(db, post_id, current_user.id):
        raise PostNotFoundError(f"Post {post_id} not found")
