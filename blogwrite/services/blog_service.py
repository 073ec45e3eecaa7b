"""
Blogwrite Backend — Blog Service
=================================

What:  Business rules for posts: listing, retrieval with view counting,
       create/update/delete under ownership control, like toggling, comments.
How:   Stateless service; every method receives the request's AsyncSession.
       Check order for mutations is fixed: input validation (schemas, before
       the service is called) → existence (404) → ownership (403) → mutation.

Consistency:
    - views are bumped with a single UPDATE ... SET views = views + 1
    - a like is a (blog_id, user_id) primary-key row; the toggle deletes it if
      present, otherwise inserts it
    - list pages and their COUNT are two separate reads of the same filter
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, Row, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from blogwrite.database import translate_db_errors
from blogwrite.exceptions import NotFoundError
from blogwrite.models.blog import Blog, BlogLike, BlogTag, Comment
from blogwrite.schemas.blog import (
    BlogCreate,
    BlogDetail,
    BlogListResponse,
    BlogSummary,
    BlogUpdate,
    CommentCreate,
    CommentResponse,
    LikeResponse,
)
from blogwrite.schemas.common import Pagination
from blogwrite.schemas.user import AuthorDetail, AuthorSummary
from blogwrite.security import Identity
from blogwrite.services import query_builder
from blogwrite.services.access_control import ensure_can_mutate
from blogwrite.services.query_builder import PageWindow

logger = logging.getLogger(__name__)

# Relationships needed to render list items; comments are counted, not loaded
SUMMARY_OPTIONS: Sequence[LoaderOption] = (
    selectinload(Blog.author),
    selectinload(Blog.tag_rows),
    selectinload(Blog.like_rows),
)

COMMENT_COUNT = (
    select(func.count())
    .where(Comment.blog_id == Blog.id)
    .correlate(Blog)
    .scalar_subquery()
    .label("comment_count")
)

# Relationships needed to render a full post, comment authors included
DETAIL_OPTIONS: Sequence[LoaderOption] = (
    selectinload(Blog.author),
    selectinload(Blog.tag_rows),
    selectinload(Blog.like_rows),
    selectinload(Blog.comments).selectinload(Comment.author),
)


def parse_blog_id(raw: str) -> uuid.UUID:
    """
    Parses a post id from the URL.

    A malformed id cannot name an existing post, so it is reported as
    NotFoundError like any other missing post.
    """
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise NotFoundError(resource="blog", resource_id=str(raw)) from None


# ── Response builders ─────────────────────────────────────────────────────
def to_summary(blog: Blog, comment_count: int) -> BlogSummary:
    return BlogSummary(
        id=blog.id,
        title=blog.title,
        tags=blog.tags,
        featured_image=blog.featured_image,
        published=blog.published,
        author=AuthorSummary.model_validate(blog.author),
        views=blog.views,
        likes=blog.like_user_ids,
        comment_count=comment_count,
        created_at=blog.created_at,
        updated_at=blog.updated_at,
    )


def to_comment(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        author=AuthorSummary.model_validate(comment.author),
        content=comment.content,
        created_at=comment.created_at,
    )


def to_detail(blog: Blog) -> BlogDetail:
    summary = to_summary(blog, len(blog.comments)).model_dump(exclude={"author"})
    return BlogDetail(
        **summary,
        content=blog.content,
        author=AuthorDetail.model_validate(blog.author),
        comments=[to_comment(c) for c in blog.comments],
    )


async def fetch_page(
    db: AsyncSession,
    conditions: List[ColumnElement[bool]],
    window: PageWindow,
) -> tuple[List[Row[Tuple[Blog, int]]], Pagination]:
    """
    Runs the page query and the COUNT query for one filter.

    Page rows are (blog, comment_count) pairs.

    Both queries are built from the same `conditions`; they are not read
    atomically with respect to concurrent writes.
    """
    result = await db.execute(
        query_builder.page_query(conditions, window)
        .add_columns(COMMENT_COUNT)
        .options(*SUMMARY_OPTIONS)
    )
    rows = list(result.all())
    total = await db.scalar(query_builder.count_query(conditions)) or 0
    return rows, window.pagination(total)


class BlogService:
    """
    Business logic layer for posts.

    Responsibilities:
        - list_published(): public, filtered, paginated summaries
        - get_blog():       full post; increments views
        - create_blog() / update_blog() / delete_blog(): owner-controlled CRUD
        - toggle_like():    like/unlike
        - add_comment():    append a comment
    """

    async def _load_blog(self, db: AsyncSession, blog_id: uuid.UUID) -> Optional[Blog]:
        """Loads a post with everything needed for BlogDetail, refreshing cached state."""
        result = await db.execute(
            select(Blog)
            .where(Blog.id == blog_id)
            .options(*DETAIL_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _require_blog_exists(self, db: AsyncSession, blog_id: uuid.UUID) -> None:
        found = await db.scalar(select(Blog.id).where(Blog.id == blog_id))
        if found is None:
            raise NotFoundError(resource="blog", resource_id=str(blog_id))

    async def list_published(
        self,
        db: AsyncSession,
        window: PageWindow,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        author: Optional[uuid.UUID] = None,
    ) -> BlogListResponse:
        """
        Public listing of published posts, newest first.

        Items are summaries: the full `content` is never included.
        """
        conditions = query_builder.public_filters(search=search, tag=tag, author=author)
        with translate_db_errors("list blogs"):
            rows, pagination = await fetch_page(db, conditions, window)
        return BlogListResponse(
            blogs=[to_summary(blog, count) for blog, count in rows],
            pagination=pagination,
        )

    async def get_blog(self, db: AsyncSession, raw_id: str) -> BlogDetail:
        """
        Returns a full post and counts the view.

        Not idempotent: every successful call increases `views` by exactly 1.
        """
        blog_id = parse_blog_id(raw_id)
        with translate_db_errors("get blog"):
            result = await db.execute(
                update(Blog)
                .where(Blog.id == blog_id)
                .values(views=Blog.views + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="blog", resource_id=str(blog_id))
            blog = await self._load_blog(db, blog_id)
        return to_detail(blog)

    async def create_blog(
        self, db: AsyncSession, identity: Identity, data: BlogCreate
    ) -> BlogDetail:
        """Creates a post owned by the requester. Unpublished unless stated."""
        with translate_db_errors("create blog"):
            blog = Blog(
                title=data.title,
                content=data.content,
                featured_image=data.featured_image or "",
                published=bool(data.published),
                author_id=identity.user_id,
            )
            blog.set_tags(data.tags or [])
            db.add(blog)
            await db.flush()
            logger.info("Blog %s created by %s", blog.id, identity.user_id)
            blog = await self._load_blog(db, blog.id)
        return to_detail(blog)

    async def update_blog(
        self, db: AsyncSession, identity: Identity, raw_id: str, data: BlogUpdate
    ) -> BlogDetail:
        """
        Applies a partial update to a post the requester owns.

        Raises:
            NotFoundError:  post does not exist (checked first)
            ForbiddenError: requester is not the author
        """
        blog_id = parse_blog_id(raw_id)
        with translate_db_errors("update blog"):
            blog = await self._load_blog(db, blog_id)
            if blog is None:
                raise NotFoundError(resource="blog", resource_id=str(blog_id))
            ensure_can_mutate(identity, blog, action="update")

            changes = data.model_dump(exclude_unset=True)
            if "tags" in changes:
                blog.set_tags(changes.pop("tags"))
            for field, value in changes.items():
                setattr(blog, field, value)
            blog.updated_at = datetime.now(timezone.utc)

            await db.flush()
            logger.info("Blog %s updated (%s)", blog.id, ", ".join(sorted(data.model_fields_set)))
            blog = await self._load_blog(db, blog_id)
        return to_detail(blog)

    async def delete_blog(self, db: AsyncSession, identity: Identity, raw_id: str) -> None:
        """
        Removes a post the requester owns, together with its tags, likes and
        comments. There is no soft delete.
        """
        blog_id = parse_blog_id(raw_id)
        with translate_db_errors("delete blog"):
            blog = await db.get(Blog, blog_id)
            if blog is None:
                raise NotFoundError(resource="blog", resource_id=str(blog_id))
            ensure_can_mutate(identity, blog, action="delete")

            for child in (Comment, BlogLike, BlogTag):
                await db.execute(
                    delete(child)
                    .where(child.blog_id == blog_id)
                    .execution_options(synchronize_session=False)
                )
            await db.execute(
                delete(Blog)
                .where(Blog.id == blog_id)
                .execution_options(synchronize_session=False)
            )
            db.expunge(blog)
        logger.info("Blog %s deleted by %s", blog_id, identity.user_id)

    async def toggle_like(
        self, db: AsyncSession, identity: Identity, raw_id: str
    ) -> LikeResponse:
        """
        Likes the post if the requester has not, otherwise unlikes it.

        Calling twice restores the original like set.
        """
        blog_id = parse_blog_id(raw_id)
        with translate_db_errors("toggle like"):
            await self._require_blog_exists(db, blog_id)

            removed = await db.execute(
                delete(BlogLike)
                .where(BlogLike.blog_id == blog_id, BlogLike.user_id == identity.user_id)
                .execution_options(synchronize_session=False)
            )
            is_liked = removed.rowcount == 0
            if is_liked:
                db.add(BlogLike(blog_id=blog_id, user_id=identity.user_id))
                await db.flush()

            likes = await db.scalar(
                select(func.count()).select_from(BlogLike).where(BlogLike.blog_id == blog_id)
            )
        return LikeResponse(
            message="Blog liked" if is_liked else "Blog unliked",
            is_liked=is_liked,
            likes=likes or 0,
        )

    async def add_comment(
        self, db: AsyncSession, identity: Identity, raw_id: str, data: CommentCreate
    ) -> CommentResponse:
        """Appends a comment by the requester. Any authenticated user may comment."""
        blog_id = parse_blog_id(raw_id)
        with translate_db_errors("add comment"):
            await self._require_blog_exists(db, blog_id)

            comment = Comment(
                blog_id=blog_id,
                author_id=identity.user_id,
                content=data.content,
            )
            db.add(comment)
            await db.flush()

            result = await db.execute(
                select(Comment)
                .where(Comment.id == comment.id)
                .options(selectinload(Comment.author))
                .execution_options(populate_existing=True)
            )
            comment = result.scalar_one()
        return to_comment(comment)


# ── Singleton Instance ────────────────────────────────────────────────────
blog_service = BlogService()
