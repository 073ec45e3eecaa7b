"""
Blogwrite Backend — Auth Service
=================================

What:  Registration, login, and the "current user" lookup.
How:   Emails are stored lower-cased. A duplicate email or username is
       reported as ConflictError, both on the pre-check and when the unique
       index rejects a racing insert. Login failures never reveal which half
       of the credentials was wrong.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogwrite.database import translate_db_errors
from blogwrite.exceptions import ConflictError, NotFoundError, UnauthenticatedError
from blogwrite.models.user import User
from blogwrite.schemas.user import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserPublic,
)
from blogwrite.security import Identity, PasswordHasher, TokenManager

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class AuthService:

    async def register(
        self,
        db: AsyncSession,
        hasher: PasswordHasher,
        tokens: TokenManager,
        data: RegisterRequest,
    ) -> AuthResponse:
        """
        Creates an account and returns a token for it.

        Raises:
            ConflictError: email (case-insensitive) or username already in use
        """
        email = data.email.lower()
        with translate_db_errors("register"):
            existing = await db.scalar(
                select(User.id).where(
                    or_(User.email == email, User.username == data.username)
                )
            )
            if existing is not None:
                raise ConflictError(DUPLICATE_USER_MESSAGE)

            user = User(
                username=data.username,
                email=email,
                password_hash=await hasher.hash(data.password),
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError(DUPLICATE_USER_MESSAGE) from None

        logger.info("User %s registered (%s)", user.id, user.username)
        return AuthResponse(
            message="User registered successfully",
            token=tokens.create_access_token(user.id, user.username),
            user=UserPublic.model_validate(user),
        )

    async def login(
        self,
        db: AsyncSession,
        hasher: PasswordHasher,
        tokens: TokenManager,
        data: LoginRequest,
    ) -> AuthResponse:
        """
        Exchanges email + password for a token.

        Hashes made with a deprecated scheme are upgraded on successful login.
        """
        with translate_db_errors("login"):
            user = await db.scalar(select(User).where(User.email == data.email.lower()))
            if user is None or not await hasher.verify(data.password, user.password_hash):
                logger.info("Failed login attempt for %s", data.email.lower())
                raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)

            if hasher.context.needs_update(user.password_hash):
                user.password_hash = await hasher.hash(data.password)
                await db.flush()
                logger.info("Upgraded password hash for user %s", user.id)

        return AuthResponse(
            message="Login successful",
            token=tokens.create_access_token(user.id, user.username),
            user=UserPublic.model_validate(user),
        )

    async def me(self, db: AsyncSession, identity: Identity) -> MeResponse:
        with translate_db_errors("load current user"):
            user = await db.get(User, identity.user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(identity.user_id))
        return MeResponse(user=UserPublic.model_validate(user))


auth_service = AuthService()
