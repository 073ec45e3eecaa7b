"""
Blogwrite Backend — User Service
=================================

What:  Public profiles, profile updates, the requester's own post list, and
       per-author statistics.
How:   Same stateless pattern as BlogService. Statistics are computed with SQL
       aggregates and have no side effects.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogwrite.database import translate_db_errors
from blogwrite.exceptions import ConflictError, NotFoundError
from blogwrite.models.blog import Blog, BlogLike
from blogwrite.models.user import User
from blogwrite.schemas.blog import OwnBlogItem, OwnBlogListResponse
from blogwrite.schemas.user import (
    ProfileBlogItem,
    ProfileResponse,
    ProfileUpdateRequest,
    StatsResponse,
    UserPublic,
)
from blogwrite.security import Identity
from blogwrite.services import query_builder
from blogwrite.services.blog_service import fetch_page, to_summary
from blogwrite.services.query_builder import PageWindow

logger = logging.getLogger(__name__)

PROFILE_BLOG_LIMIT = 10


class UserService:

    async def get_profile(self, db: AsyncSession, raw_id: str) -> ProfileResponse:
        """
        Public profile: the user plus up to 10 of their published posts,
        newest first.
        """
        try:
            user_id = uuid.UUID(str(raw_id))
        except ValueError:
            raise NotFoundError(resource="user", resource_id=str(raw_id)) from None

        with translate_db_errors("get profile"):
            user = await db.get(User, user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))

            like_count = (
                select(func.count())
                .where(BlogLike.blog_id == Blog.id)
                .correlate(Blog)
                .scalar_subquery()
            )
            result = await db.execute(
                select(Blog.id, Blog.title, Blog.created_at, Blog.views, like_count.label("likes"))
                .where(Blog.author_id == user_id, Blog.published.is_(True))
                .order_by(desc(Blog.created_at), desc(Blog.id))
                .limit(PROFILE_BLOG_LIMIT)
            )
            rows = result.all()

        return ProfileResponse(
            user=UserPublic.model_validate(user),
            blogs=[
                ProfileBlogItem(
                    id=row.id,
                    title=row.title,
                    created_at=row.created_at,
                    views=row.views,
                    likes=row.likes,
                )
                for row in rows
            ],
        )

    async def update_profile(
        self, db: AsyncSession, identity: Identity, data: ProfileUpdateRequest
    ) -> UserPublic:
        """
        Updates the requester's own username/bio/avatar.

        A new username is checked against all other users first; the unique
        constraint backs that check if two requests race.

        Raises:
            NotFoundError: the requester's account no longer exists
            ConflictError: username already taken
        """
        changes = data.model_dump(exclude_unset=True)

        with translate_db_errors("update profile"):
            user = await db.get(User, identity.user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(identity.user_id))

            new_username = changes.get("username")
            if new_username and new_username != user.username:
                taken = await db.scalar(
                    select(User.id).where(User.username == new_username, User.id != user.id)
                )
                if taken is not None:
                    raise ConflictError("Username already taken", field="username")

            for field, value in changes.items():
                setattr(user, field, value)
            user.updated_at = datetime.now(timezone.utc)

            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError("Username already taken", field="username") from None

        logger.info("Profile %s updated (%s)", user.id, ", ".join(sorted(changes)))
        return UserPublic.model_validate(user)

    async def list_own_blogs(
        self,
        db: AsyncSession,
        identity: Identity,
        window: PageWindow,
        published: Optional[str] = None,
    ) -> OwnBlogListResponse:
        """The requester's posts, drafts included unless `published` is given."""
        conditions = query_builder.owner_filters(identity.user_id, published=published)
        with translate_db_errors("list own blogs"):
            rows, pagination = await fetch_page(db, conditions, window)
        return OwnBlogListResponse(
            blogs=[
                OwnBlogItem(**to_summary(blog, count).model_dump(), content=blog.content)
                for blog, count in rows
            ],
            pagination=pagination,
        )

    async def get_stats(self, db: AsyncSession, identity: Identity) -> StatsResponse:
        """
        Aggregates over the requester's posts: total and published counts,
        summed views, and summed like-set sizes. Drafts = total - published.
        """
        with translate_db_errors("get stats"):
            counts = (
                await db.execute(
                    select(
                        func.count(Blog.id).label("total"),
                        func.coalesce(
                            func.sum(case((Blog.published.is_(True), 1), else_=0)), 0
                        ).label("published"),
                        func.coalesce(func.sum(Blog.views), 0).label("views"),
                    ).where(Blog.author_id == identity.user_id)
                )
            ).one()

            total_likes = await db.scalar(
                select(func.count())
                .select_from(BlogLike)
                .join(Blog, Blog.id == BlogLike.blog_id)
                .where(Blog.author_id == identity.user_id)
            )

        total = int(counts.total)
        published = int(counts.published)
        return StatsResponse(
            total_blogs=total,
            published_blogs=published,
            draft_blogs=total - published,
            total_views=int(counts.views),
            total_likes=int(total_likes or 0),
        )


user_service = UserService()
