"""
Blogwrite Backend — User Route Handlers
========================================

What:  Public profiles, own-profile update, the requester's post list and
       statistics.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from blogwrite.database import get_db_session
from blogwrite.schemas.blog import OwnBlogListResponse
from blogwrite.schemas.common import ErrorResponse
from blogwrite.schemas.user import (
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    StatsResponse,
)
from blogwrite.security import Identity, get_current_identity
from blogwrite.services.query_builder import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    MAX_PAGE,
    PageWindow,
)
from blogwrite.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "/profile/{user_id}",
    response_model=ProfileResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Public profile with recent published posts",
)
async def get_profile(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await user_service.get_profile(db, user_id)


@router.put(
    "/profile",
    response_model=ProfileUpdateResponse,
    responses={
        400: {"description": "Invalid input or username taken", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
    },
    summary="Update the authenticated user's profile",
)
async def update_profile(
    body: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileUpdateResponse:
    user = await user_service.update_profile(db, identity, body)
    return ProfileUpdateResponse(message="Profile updated successfully", user=user)


@router.get(
    "/my-blogs",
    response_model=OwnBlogListResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="The authenticated user's posts, drafts included",
)
async def my_blogs(
    page: int = Query(default=DEFAULT_PAGE, ge=1, le=MAX_PAGE),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    published: Optional[str] = Query(
        default=None,
        description='"true" for published posts only; any other value for drafts only',
    ),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> OwnBlogListResponse:
    window = PageWindow(page=page, limit=limit)
    return await user_service.list_own_blogs(db, identity, window, published=published)


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Aggregate counters over the authenticated user's posts",
)
async def stats(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> StatsResponse:
    return await user_service.get_stats(db, identity)
