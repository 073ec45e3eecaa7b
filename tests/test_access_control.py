"""
Blogwrite Backend — Access Control Unit Tests
==============================================

What:  Tests for the ownership predicate that guards post update and delete.
How:   Plain in-memory objects; no database.
"""

import pytest
from types import SimpleNamespace
from uuid import uuid4

from blogwrite.exceptions import ForbiddenError
from blogwrite.security import Identity
from blogwrite.services.access_control import can_mutate, ensure_can_mutate


class TestOwnership:

    def setup_method(self):
        self.author = Identity(user_id=uuid4(), username="alice")
        self.other = Identity(user_id=uuid4(), username="bob")
        self.blog = SimpleNamespace(id=uuid4(), author_id=self.author.user_id)

    def test_author_can_mutate(self):
        """The author owns the post."""
        assert can_mutate(self.author, self.blog) is True

    def test_other_user_cannot_mutate(self):
        """Any other identity does not."""
        assert can_mutate(self.other, self.blog) is False

    def test_ensure_passes_for_author(self):
        ensure_can_mutate(self.author, self.blog, action="delete")

    def test_ensure_raises_for_non_author(self):
        """Non-authors get ForbiddenError naming the action."""
        with pytest.raises(ForbiddenError) as exc_info:
            ensure_can_mutate(self.other, self.blog, action="update")
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Not authorized to update this blog"

    def test_delete_message(self):
        with pytest.raises(ForbiddenError, match="Not authorized to delete this blog"):
            ensure_can_mutate(self.other, self.blog, action="delete")
