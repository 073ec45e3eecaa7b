"""
Blogwrite Backend — User SQLAlchemy Model
==========================================

What:  ORM model for the `users` table.
How:   username and email carry unique constraints; the password hash is opaque
       to everything except blogwrite.security.

Lifecycle:
    1. Created by registration
    2. Mutated only by its owner via profile update
    3. Never deleted by this service
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from blogwrite.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        index=True,
        comment="Public handle; 3-20 chars of letters, digits, underscore",
    )

    # Stored lower-cased; lookups lower-case the input
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    bio: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
        comment="Free-form profile text, at most 500 chars",
    )

    avatar: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        default="",
        server_default=text("''"),
        comment="Avatar image URL",
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

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
