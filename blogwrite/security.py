"""
Blogwrite Backend — Authentication Collaborator
================================================

What:  Password hashing, JWT access tokens, and the FastAPI dependency that
       turns a bearer token into the requesting Identity.
How:   passlib CryptContext (argon2 primary, pbkdf2_sha256 accepted and marked
       deprecated) and python-jose HS256 tokens. Both helpers are built from
       Settings by the app factory and live on app.state.

Token claims:
    sub       user id (UUID string)
    username  username at issue time (informational)
    iat/exp   issue and expiry timestamps
    type      always "access"
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from blogwrite.config import Settings
from blogwrite.database import get_db_session
from blogwrite.exceptions import UnauthenticatedError
from blogwrite.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated user a request acts as."""

    user_id: uuid.UUID
    username: str


class PasswordHasher:
    """Argon2id hashing via passlib; hashing runs in the threadpool."""

    def __init__(self, settings: Settings):
        self.context = CryptContext(
            schemes=["argon2", "pbkdf2_sha256"],
            deprecated="pbkdf2_sha256",
            argon2__time_cost=settings.argon2_time_cost,
            argon2__memory_cost=settings.argon2_memory_cost,
        )

    async def hash(self, password: str) -> str:
        return await run_in_threadpool(self.context.hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        try:
            return await run_in_threadpool(self.context.verify, password, password_hash)
        except (ValueError, TypeError):
            # Malformed or unknown hash format
            logger.warning("Password hash could not be parsed")
            return False


class TokenManager:
    """Issues and verifies signed JWT access tokens."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.expire_minutes = settings.access_token_expire_minutes

    def create_access_token(
        self,
        user_id: uuid.UUID,
        username: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        claims = {
            "sub": str(user_id),
            "username": username,
            "iat": now,
            "exp": expire,
            "type": "access",
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Optional[uuid.UUID]:
        """
        Returns the user id carried by a valid access token, or None.

        Invalid signature, expiry, wrong type and malformed subject all yield None.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        if payload.get("type") != "access":
            return None
        try:
            return uuid.UUID(str(payload.get("sub")))
        except ValueError:
            return None


# ── Dependencies ──────────────────────────────────────────────────────────
def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenManager = Depends(get_token_manager),
    db: AsyncSession = Depends(get_db_session),
) -> Identity:
    """
    Resolves the `Authorization: Bearer <token>` header to an Identity.

    Raises:
        UnauthenticatedError: header missing, token invalid/expired, or the
            user it names no longer exists (→ 401)
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("No token, authorization denied")

    user_id = tokens.decode_access_token(credentials.credentials)
    if user_id is None:
        raise UnauthenticatedError("Token is not valid")

    result = await db.execute(select(User.id, User.username).where(User.id == user_id))
    row = result.one_or_none()
    if row is None:
        raise UnauthenticatedError("Token is not valid")

    return Identity(user_id=row.id, username=row.username)
