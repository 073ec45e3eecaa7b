"""
Blogwrite Backend — Blog SQLAlchemy Models
===========================================

What:  ORM models for posts and their owned collections.
How:   A post is one `blogs` row plus child rows:

    blogs ─┬─< blog_tags   (ordered tag strings, position column)
           ├─< blog_likes  (PK = blog_id + user_id → a user likes at most once)
           └─< comments    (append-only, ordered by created_at)

    Child foreign keys use ON DELETE CASCADE, so removing a post removes its
    tags, likes and comments with it.

    Relationships are lazy="raise": async sessions cannot lazy-load, so every
    query that needs a relationship eager-loads it explicitly (see
    services/blog_service.py).
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogwrite.database import Base
from blogwrite.models.user import User, utcnow


class Blog(Base):
    """
    A blog post.

    Invariants:
        - author_id is set at creation and never reassigned
        - views only ever increases (by 1 per single-post retrieval)
        - like_rows holds at most one row per user (composite primary key)
    """

    __tablename__ = "blogs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    featured_image: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        default="",
        server_default=text("''"),
    )

    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # ── Relationships ─────────────────────────────────────────────────────
    author: Mapped[User] = relationship(lazy="raise")

    tag_rows: Mapped[List["BlogTag"]] = relationship(
        back_populates="blog",
        order_by="BlogTag.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    like_rows: Mapped[List["BlogLike"]] = relationship(
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="blog",
        order_by="Comment.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    __table_args__ = (
        Index("idx_blogs_published_created_at", "published", "created_at"),
        Index("idx_blogs_author_created_at", "author_id", "created_at"),
    )

    @property
    def tags(self) -> List[str]:
        return [row.name for row in self.tag_rows]

    def set_tags(self, tags: List[str]) -> None:
        """Replaces the tag sequence, preserving the given order."""
        self.tag_rows = [BlogTag(name=name, position=i) for i, name in enumerate(tags)]

    @property
    def like_user_ids(self) -> List[uuid.UUID]:
        return [row.user_id for row in self.like_rows]

    def __repr__(self) -> str:
        return (
            f"<Blog(id={self.id}, title='{self.title}', "
            f"published={self.published}, author_id={self.author_id})>"
        )


class BlogTag(Base):
    __tablename__ = "blog_tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("blogs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    blog: Mapped[Blog] = relationship(back_populates="tag_rows", lazy="raise")


class BlogLike(Base):
    """One user's like on one post. Existence of the row is the like."""

    __tablename__ = "blog_likes"

    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("blogs.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


class Comment(Base):
    """A comment embedded in a post. Never edited; removed only with its post."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("blogs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    blog: Mapped[Blog] = relationship(back_populates="comments", lazy="raise")
    author: Mapped[User] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, blog_id={self.blog_id}, author_id={self.author_id})>"
