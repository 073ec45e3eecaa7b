"""
Blogwrite Backend — ORM Models
===============================

Importing this package registers every table on Base.metadata
(used by Database.create_all and Alembic autogenerate).
"""

from blogwrite.models.blog import Blog, BlogLike, BlogTag, Comment
from blogwrite.models.user import User

__all__ = ["Blog", "BlogLike", "BlogTag", "Comment", "User"]
