"""
Blogwrite Backend — Resource Access Control
============================================

What:  The single authorization predicate for mutating a post.
How:   A post may be mutated only by its author. Callers load the post first
       (a missing post is NotFoundError for everyone) and then call
       ensure_can_mutate, so the order is always 404 → 403 → mutation.
"""

import logging

from blogwrite.exceptions import ForbiddenError
from blogwrite.models.blog import Blog
from blogwrite.security import Identity

logger = logging.getLogger(__name__)


def can_mutate(identity: Identity, blog: Blog) -> bool:
    """True iff the identity is the author of the post."""
    return blog.author_id == identity.user_id


def ensure_can_mutate(identity: Identity, blog: Blog, action: str = "update") -> None:
    """
    Raises ForbiddenError unless `identity` owns `blog`.

    Args:
        identity: the authenticated requester
        blog:     a post that is known to exist
        action:   verb used in the error message ("update", "delete")
    """
    if can_mutate(identity, blog):
        return
    logger.info(
        "Denied %s on blog %s for user %s (author %s)",
        action,
        blog.id,
        identity.user_id,
        blog.author_id,
    )
    raise ForbiddenError(action=action, resource="blog")
