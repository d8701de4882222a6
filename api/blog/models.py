from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Query, Session, relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostStatus(str, Enum):
    """Publication state of a post. Transmitted on the wire by name."""

    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"
    SCHEDULED = "Scheduled"


class UserRole(str, Enum):
    USER = "User"
    EDITOR = "Editor"
    ADMIN = "Admin"


# ============================================================================
# SOFT DELETE
# ============================================================================

LIVE_ROWS_WHERE = text("deleted_at IS NULL")


class SoftDeleteMixin:
    """Rows are hidden by stamping deleted_at instead of being removed."""

    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @classmethod
    def live_rows(cls):
        """The one predicate every read path uses to exclude soft-deleted rows."""
        return cls.deleted_at.is_(None)

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()


def live_query(db: Session, model: type[SoftDeleteMixin], *entities) -> Query:
    """Start a query over the live rows of a soft-deletable model."""
    return db.query(*(entities or (model,))).filter(model.live_rows())


# ============================================================================
# CORE ENTITIES
# ============================================================================


class User(SoftDeleteMixin, Base):
    """User account. Only id, username and avatar_url are ever exposed publicly."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False)
    username = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    posts = relationship("Post", back_populates="author", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", passive_deletes=True)
    sessions = relationship("UserSession", back_populates="user", passive_deletes=True)
    bookmarks = relationship("Bookmark", back_populates="user", passive_deletes=True)

    __table_args__ = (
        Index(
            "uq_users_email_live", "email", unique=True,
            postgresql_where=LIVE_ROWS_WHERE, sqlite_where=LIVE_ROWS_WHERE,
        ),
        Index(
            "uq_users_username_live", "username", unique=True,
            postgresql_where=LIVE_ROWS_WHERE, sqlite_where=LIVE_ROWS_WHERE,
        ),
    )


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    posts = relationship("Post", back_populates="category")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    slug = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Post(SoftDeleteMixin, Base):
    """Blog post. Slug is unique among live posts only."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Content
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(String(500), nullable=True)

    # SEO & metadata
    thumbnail_url = Column(String(500), nullable=True)
    reading_time_minutes = Column(Integer, nullable=False, default=1)
    seo_keywords = Column(String(500), nullable=True)
    meta_description = Column(String(160), nullable=True)

    # State
    status = Column(String(20), nullable=False, default=PostStatus.DRAFT.value, index=True)
    view_count = Column(BigInteger, nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Relationships
    author = relationship("User", back_populates="posts", foreign_keys=[user_id])
    category = relationship("Category", back_populates="posts")
    post_tags = relationship(
        "PostTag", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    tags = relationship("Tag", secondary="post_tags", viewonly=True, order_by="Tag.id")
    comments = relationship("Comment", back_populates="post", passive_deletes=True)
    revisions = relationship("PostRevision", back_populates="post", passive_deletes=True)

    __table_args__ = (
        Index(
            "uq_posts_slug_live", "slug", unique=True,
            postgresql_where=LIVE_ROWS_WHERE, sqlite_where=LIVE_ROWS_WHERE,
        ),
        Index("ix_posts_status_created", status, created_at),
    )


class PostTag(Base):
    """Post <-> tag association. Replaced wholesale on every post update."""

    __tablename__ = "post_tags"

    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)

    post = relationship("Post", back_populates="post_tags")
    tag = relationship("Tag")


class Comment(SoftDeleteMixin, Base):
    """Comment on a post. Threaded through a non-owning parent link."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_comment_id = Column(
        Integer, ForeignKey("comments.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    post = relationship("Post", back_populates="comments")
    author = relationship("User", back_populates="comments")
    parent = relationship("Comment", remote_side=[id])
    # Children are looked up at query time; the parent never owns them.
    replies = relationship("Comment", viewonly=True, order_by="Comment.created_at")


class PostRevision(Base):
    """Append-only snapshot of a post's text. Not written by any current path."""

    __tablename__ = "post_revisions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(String(500), nullable=True)
    revision_number = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    post = relationship("Post", back_populates="revisions")


class MediaFile(SoftDeleteMixin, Base):
    __tablename__ = "media_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    cdn_url = Column(String(500), nullable=True)
    mime_type = Column(String(100), nullable=False)
    file_size_bytes = Column(BigInteger, nullable=False)

    # Images only
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    alt_text = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = relationship("User")


class UserSession(Base):
    """Refresh-token session for a user."""

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    refresh_token = Column(String(500), nullable=False, unique=True)
    device_info = Column(String(500), nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    is_revoked = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="sessions")


class Bookmark(Base):
    __tablename__ = "bookmarks"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="bookmarks")
    post = relationship("Post")
