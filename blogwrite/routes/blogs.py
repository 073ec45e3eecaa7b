"""
Blogwrite Backend — Blog Route Handlers
========================================

What:  Public listing and retrieval of posts, owner-controlled create/update/
       delete, like toggling and comments.
How:   Extracts path/query/body parameters, delegates to BlogService.

Post ids are taken as plain strings: a malformed id is a missing post (404),
not a validation error.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from blogwrite.database import get_db_session
from blogwrite.schemas.blog import (
    BlogCreate,
    BlogDetail,
    BlogListResponse,
    BlogMutationResponse,
    BlogUpdate,
    CommentCreate,
    CommentCreatedResponse,
    LikeResponse,
)
from blogwrite.schemas.common import ErrorResponse, MessageResponse
from blogwrite.security import Identity, get_current_identity
from blogwrite.services.blog_service import blog_service
from blogwrite.services.query_builder import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    MAX_PAGE,
    PageWindow,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blogs", tags=["Blogs"])

_AUTH_ERRORS = {401: {"description": "Not authenticated", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Blog not found", "model": ErrorResponse}}
_FORBIDDEN = {403: {"description": "Not the author", "model": ErrorResponse}}
_INVALID = {400: {"description": "Invalid input", "model": ErrorResponse}}


@router.get(
    "",
    response_model=BlogListResponse,
    responses=_INVALID,
    summary="List published posts",
    description=(
        "Published posts, newest first. `search` matches title, content or any "
        "tag; `tag` matches tags only; both are case-insensitive substring "
        "matches. Items omit the post content."
    ),
)
async def list_blogs(
    page: int = Query(default=DEFAULT_PAGE, ge=1, le=MAX_PAGE),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: Optional[str] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    author: Optional[UUID] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> BlogListResponse:
    window = PageWindow(page=page, limit=limit)
    return await blog_service.list_published(
        db, window, search=search, tag=tag, author=author
    )


@router.get(
    "/{blog_id}",
    response_model=BlogDetail,
    responses=_NOT_FOUND,
    summary="Get a post",
    description="Returns the full post and increments its view counter by one.",
)
async def get_blog(
    blog_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> BlogDetail:
    return await blog_service.get_blog(db, blog_id)


@router.post(
    "",
    response_model=BlogMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_INVALID, **_AUTH_ERRORS},
    summary="Create a post",
)
async def create_blog(
    body: BlogCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> BlogMutationResponse:
    blog = await blog_service.create_blog(db, identity, body)
    return BlogMutationResponse(message="Blog created successfully", blog=blog)


@router.put(
    "/{blog_id}",
    response_model=BlogMutationResponse,
    responses={**_INVALID, **_AUTH_ERRORS, **_FORBIDDEN, **_NOT_FOUND},
    summary="Update a post you wrote",
)
async def update_blog(
    blog_id: str,
    body: BlogUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> BlogMutationResponse:
    blog = await blog_service.update_blog(db, identity, blog_id, body)
    return BlogMutationResponse(message="Blog updated successfully", blog=blog)


@router.delete(
    "/{blog_id}",
    response_model=MessageResponse,
    responses={**_AUTH_ERRORS, **_FORBIDDEN, **_NOT_FOUND},
    summary="Delete a post you wrote",
)
async def delete_blog(
    blog_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await blog_service.delete_blog(db, identity, blog_id)
    return MessageResponse(message="Blog deleted successfully")


@router.post(
    "/{blog_id}/like",
    response_model=LikeResponse,
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
    summary="Like or unlike a post",
)
async def toggle_like(
    blog_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> LikeResponse:
    return await blog_service.toggle_like(db, identity, blog_id)


@router.post(
    "/{blog_id}/comments",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_INVALID, **_AUTH_ERRORS, **_NOT_FOUND},
    summary="Comment on a post",
)
async def add_comment(
    blog_id: str,
    body: CommentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentCreatedResponse:
    comment = await blog_service.add_comment(db, identity, blog_id, body)
    return CommentCreatedResponse(message="Comment added successfully", comment=comment)
