"""
Blogwrite Backend — Auth Route Handlers
========================================

What:  Registration, login, and the current-user endpoint.
How:   Tokens are issued by the app's TokenManager; passwords go through the
       app's PasswordHasher. Both come from app.state via dependencies.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from blogwrite.database import get_db_session
from blogwrite.schemas.common import ErrorResponse
from blogwrite.schemas.user import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from blogwrite.security import (
    Identity,
    PasswordHasher,
    TokenManager,
    get_current_identity,
    get_password_hasher,
    get_token_manager,
)
from blogwrite.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid input or user already exists", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenManager = Depends(get_token_manager),
) -> AuthResponse:
    return await auth_service.register(db, hasher, tokens, body)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange email and password for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenManager = Depends(get_token_manager),
) -> AuthResponse:
    return await auth_service.login(db, hasher, tokens, body)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="The authenticated user",
)
async def me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MeResponse:
    return await auth_service.me(db, identity)
