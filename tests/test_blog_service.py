"""
Blogwrite Backend — Blog Service Unit Tests
============================================

What:  Tests for BlogService check ordering and id handling.
How:   Mock DB sessions; no real database.

What we test:
    ✅ Malformed post ids are NotFoundError, before any query runs
    ✅ Missing post → NotFoundError, never ForbiddenError
    ✅ Non-author → ForbiddenError, before any write
    ✅ Database failures surface as DatabaseError
"""

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from blogwrite.exceptions import DatabaseError, ForbiddenError, NotFoundError
from blogwrite.schemas.blog import BlogUpdate, CommentCreate
from blogwrite.security import Identity
from blogwrite.services.blog_service import BlogService, parse_blog_id


class TestParseBlogId:

    def test_valid(self):
        blog_id = uuid4()
        assert parse_blog_id(str(blog_id)) == blog_id

    @pytest.mark.parametrize("raw", ["abc", "123", "", "../etc"])
    def test_malformed_is_not_found(self, raw):
        with pytest.raises(NotFoundError, match="Blog not found"):
            parse_blog_id(raw)


class TestBlogServiceChecks:

    def setup_method(self):
        self.service = BlogService()
        self.identity = Identity(user_id=uuid4(), username="alice")

    @pytest.mark.asyncio
    async def test_get_malformed_id_skips_database(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_blog(mock_db_session, "not-a-uuid")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_missing_blog(self, mock_db_session):
        """No row updated by the view increment means the post does not exist."""
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        with pytest.raises(NotFoundError):
            await self.service.get_blog(mock_db_session, str(uuid4()))

    @pytest.mark.asyncio
    async def test_update_missing_blog(self, mock_db_session):
        with patch.object(self.service, "_load_blog", AsyncMock(return_value=None)):
            with pytest.raises(NotFoundError):
                await self.service.update_blog(
                    mock_db_session, self.identity, str(uuid4()), BlogUpdate(title="x")
                )
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_by_non_author(self, mock_db_session):
        """Ownership is checked before any field is touched."""
        blog = SimpleNamespace(id=uuid4(), author_id=uuid4(), title="original")
        with patch.object(self.service, "_load_blog", AsyncMock(return_value=blog)):
            with pytest.raises(ForbiddenError, match="update"):
                await self.service.update_blog(
                    mock_db_session, self.identity, str(blog.id), BlogUpdate(title="hijacked")
                )
        assert blog.title == "original"
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_missing_blog(self, mock_db_session):
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await self.service.delete_blog(mock_db_session, self.identity, str(uuid4()))
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_by_non_author(self, mock_db_session):
        mock_db_session.get.return_value = SimpleNamespace(id=uuid4(), author_id=uuid4())
        with pytest.raises(ForbiddenError, match="delete"):
            await self.service.delete_blog(mock_db_session, self.identity, str(uuid4()))
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_like_missing_blog(self, mock_db_session):
        mock_db_session.scalar.return_value = None
        with pytest.raises(NotFoundError):
            await self.service.toggle_like(mock_db_session, self.identity, str(uuid4()))
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_comment_missing_blog(self, mock_db_session):
        mock_db_session.scalar.return_value = None
        with pytest.raises(NotFoundError):
            await self.service.add_comment(
                mock_db_session, self.identity, str(uuid4()), CommentCreate(content="hi")
            )
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("UPDATE", {}, Exception("down"))
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.get_blog(mock_db_session, str(uuid4()))
        assert exc_info.value.context["operation"] == "get blog"
