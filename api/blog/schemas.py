from __future__ import annotations

from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .models import PostStatus


# ============================================================================
# BASE SCHEMAS
# ============================================================================


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Problem(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs."""

    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: str | None = None
    errors: dict[str, list[str]] | None = None


T = TypeVar("T")


class PaginationMetadata(ApiModel):
    current_page: int
    page_size: int
    total_pages: int
    total_items: int
    has_previous: bool
    has_next: bool


class PaginatedResponse(ApiModel, Generic[T]):
    """Generic offset-paginated response."""

    items: list[T]
    pagination: PaginationMetadata


# ============================================================================
# HEALTH & STATUS
# ============================================================================


class HealthResponse(ApiModel):
    status: str = "ok"
    uptime_s: float | None = None


class DbStatusResponse(ApiModel):
    connected: bool
    database: str | None = None
    current_revision: str | None = None
    head_revision: str | None = None
    pending_migrations: bool
    status: str


# ============================================================================
# SUMMARIES (embedded in post responses)
# ============================================================================


class AuthorSummary(ApiModel):
    """Public author fields. Never carries credentials."""

    id: int
    username: str
    avatar_url: str | None = None


class CategorySummary(ApiModel):
    id: int
    name: str
    slug: str


class TagSummary(ApiModel):
    id: int
    name: str
    slug: str


# ============================================================================
# POST SCHEMAS
# ============================================================================

_http_url = TypeAdapter(HttpUrl)


def _check_http_url(value: str) -> str:
    """Validate as an absolute http(s) URL but keep the caller's text unchanged."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("must be an absolute http or https URL")
    return value


ThumbnailUrl = Annotated[str, Field(max_length=500), AfterValidator(_check_http_url)]


class PostListItem(ApiModel):
    """Post as shown in listings (no body content)."""

    id: int
    title: str
    slug: str
    summary: str | None = None
    thumbnail_url: str | None = None
    reading_time_minutes: int
    status: PostStatus
    view_count: int
    is_featured: bool
    author: AuthorSummary
    category: CategorySummary | None = None
    tags: list[TagSummary] = []
    created_at: datetime
    published_at: datetime | None = None


class PostDetail(PostListItem):
    """Full post."""

    content: str
    updated_at: datetime


class PostWrite(ApiModel):
    """Fields shared by create and update requests."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    summary: str | None = Field(None, max_length=500)
    category_id: int | None = None
    tag_ids: list[int] = Field(default_factory=list)
    thumbnail_url: ThumbnailUrl | None = None
    seo_keywords: str | None = Field(None, max_length=500)
    meta_description: str | None = Field(None, max_length=160)
    status: PostStatus = PostStatus.DRAFT
    is_featured: bool = False

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PostCreate(PostWrite):
    """Create post request."""


class PostUpdate(PostWrite):
    """Update post request. Every mutable field is overwritten."""
