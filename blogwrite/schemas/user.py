"""
Blogwrite Backend — User and Auth Schemas
==========================================

What:  Request bodies for registration, login and profile update, and the
       public user representations returned by auth and profile endpoints.
How:   Field rules mirror the user model: username 3-20 chars of
       [A-Za-z0-9_], bio at most 500 chars, avatar a valid http(s) URL.
       Explicit nulls are rejected on partial updates.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, HttpUrl, TypeAdapter, field_validator

from blogwrite.schemas.common import MAX_URL_LENGTH, CamelModel

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"

_http_url = TypeAdapter(HttpUrl)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdateRequest(CamelModel):
    """
    Partial profile update. Omitted fields keep their current value.

    Only fields present in the request body are applied (model_fields_set).
    """

    username: Optional[str] = Field(
        default=None, min_length=3, max_length=20, pattern=USERNAME_PATTERN
    )
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = Field(default=None, max_length=MAX_URL_LENGTH)

    @field_validator("username", "bio", "avatar")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("avatar")
    @classmethod
    def check_avatar_url(cls, v: str) -> str:
        """Must parse as an http(s) URL; the string is stored exactly as sent."""
        try:
            _http_url.validate_python(v)
        except ValueError:
            raise ValueError("must be a valid http(s) URL") from None
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorSummary(CamelModel):
    """Author identity embedded in posts and comments."""

    id: uuid.UUID
    username: str
    avatar: str = ""

    model_config = {"from_attributes": True}


class AuthorDetail(AuthorSummary):
    bio: str = ""


class UserPublic(CamelModel):
    """A user as returned to clients. Never includes the password hash."""

    id: uuid.UUID
    username: str
    email: str
    bio: str = ""
    avatar: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserPublic


class MeResponse(CamelModel):
    user: UserPublic


class ProfileBlogItem(CamelModel):
    """Compact post entry on a public profile page."""

    id: uuid.UUID
    title: str
    created_at: datetime
    views: int
    likes: int = Field(description="Number of likes")


class ProfileResponse(CamelModel):
    user: UserPublic
    blogs: List[ProfileBlogItem]


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserPublic


class StatsResponse(CamelModel):
    """Aggregates over the requester's own posts."""

    total_blogs: int
    published_blogs: int
    draft_blogs: int
    total_views: int
    total_likes: int
