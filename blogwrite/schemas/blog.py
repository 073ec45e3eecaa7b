"""
Blogwrite Backend — Blog Schemas
=================================

What:  Request bodies for creating/updating posts and adding comments, and the
       post representations returned by the blog and user endpoints.

Representations:
    BlogSummary   list views; everything except `content`
    OwnBlogItem   "my posts" list; summary plus `content`
    BlogDetail    single post; full content, author bio, comments
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from blogwrite.schemas.common import MAX_URL_LENGTH, CamelModel, Pagination
from blogwrite.schemas.user import AuthorDetail, AuthorSummary


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BlogCreate(CamelModel):
    """
    Body of POST /api/blogs.

    tags, featuredImage and published may be omitted or null; they then take
    their defaults ([], "", false).
    """

    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    tags: Optional[List[str]] = None
    featured_image: Optional[str] = Field(default=None, max_length=MAX_URL_LENGTH)
    published: Optional[bool] = None


class BlogUpdate(CamelModel):
    """
    Body of PUT /api/blogs/{id}: a partial update.

    Only fields present in the body are applied; a field sent as "" or []
    is applied as given. Sending null is a validation error. There is no
    author field: ownership never changes.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[str]] = None
    featured_image: Optional[str] = Field(default=None, max_length=MAX_URL_LENGTH)
    published: Optional[bool] = None

    @field_validator("title", "content", "tags", "featured_image", "published")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class CommentCreate(CamelModel):
    content: str = Field(min_length=1, max_length=1000)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CommentResponse(CamelModel):
    id: uuid.UUID
    author: AuthorSummary
    content: str
    created_at: datetime


class BlogSummary(CamelModel):
    id: uuid.UUID
    title: str
    tags: List[str]
    featured_image: str
    published: bool
    author: AuthorSummary
    views: int
    likes: List[uuid.UUID] = Field(description="Ids of users who like this post")
    comment_count: int
    created_at: datetime
    updated_at: datetime


class OwnBlogItem(BlogSummary):
    content: str


class BlogDetail(BlogSummary):
    content: str
    author: AuthorDetail
    comments: List[CommentResponse]


class BlogListResponse(CamelModel):
    blogs: List[BlogSummary]
    pagination: Pagination


class OwnBlogListResponse(CamelModel):
    blogs: List[OwnBlogItem]
    pagination: Pagination


class BlogMutationResponse(CamelModel):
    message: str
    blog: BlogDetail


class LikeResponse(CamelModel):
    message: str
    is_liked: bool
    likes: int = Field(description="Like count after the toggle")


class CommentCreatedResponse(CamelModel):
    message: str
    comment: CommentResponse
