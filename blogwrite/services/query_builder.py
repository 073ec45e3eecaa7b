"""
Blogwrite Backend — List Query Builder
=======================================

What:  Turns list-endpoint parameters into a deterministic store query:
       a list of filter conditions, a fixed sort order, and a page window.
How:   Filters are plain SQLAlchemy boolean expressions. The page query and the
       COUNT query are both built from the same condition list, so they always
       use identical criteria (but are two separate reads).

Filters:
    public listing:  published = true
                     [search]  title ILIKE %s% OR content ILIKE %s% OR any tag ILIKE %s%
                     [tag]     any tag ILIKE %t%
                     [author]  author_id = :author
    my posts:        author_id = :me
                     [published] published = (raw == "true")

Sort:  created_at DESC, id DESC (id breaks ties between equal timestamps)
"""

import math
import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import ColumnElement, Select, desc, func, or_, select

from blogwrite.models.blog import Blog, BlogTag
from blogwrite.schemas.common import Pagination

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Keeps (page - 1) * limit well inside a 64-bit OFFSET
MAX_PAGE = 1_000_000

LIKE_ESCAPE = "\\"


def _contains_pattern(term: str) -> str:
    """Builds an ILIKE substring pattern, escaping the wildcard characters."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _any_tag_matches(pattern: str) -> ColumnElement[bool]:
    return Blog.tag_rows.any(BlogTag.name.ilike(pattern, escape=LIKE_ESCAPE))


def search_condition(search: str) -> ColumnElement[bool]:
    """Case-insensitive substring match on title OR content OR any tag."""
    pattern = _contains_pattern(search)
    return or_(
        Blog.title.ilike(pattern, escape=LIKE_ESCAPE),
        Blog.content.ilike(pattern, escape=LIKE_ESCAPE),
        _any_tag_matches(pattern),
    )


def tag_condition(tag: str) -> ColumnElement[bool]:
    return _any_tag_matches(_contains_pattern(tag))


def public_filters(
    search: Optional[str] = None,
    tag: Optional[str] = None,
    author: Optional[uuid.UUID] = None,
) -> List[ColumnElement[bool]]:
    """Conditions for the public listing. Only published posts are ever visible."""
    conditions: List[ColumnElement[bool]] = [Blog.published.is_(True)]
    if search:
        conditions.append(search_condition(search))
    if tag:
        conditions.append(tag_condition(tag))
    if author is not None:
        conditions.append(Blog.author_id == author)
    return conditions


def owner_filters(
    author_id: uuid.UUID,
    published: Optional[str] = None,
) -> List[ColumnElement[bool]]:
    """
    Conditions for the requester's own posts.

    `published` is the raw query-string value: absent means drafts and
    published posts alike; "true" selects published; any other value
    selects drafts.
    """
    conditions: List[ColumnElement[bool]] = [Blog.author_id == author_id]
    if published is not None:
        conditions.append(Blog.published.is_(published == "true"))
    return conditions


@dataclass(frozen=True)
class PageWindow:
    """The skip/limit slice of the sorted result set for one page request."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self):
        if not 1 <= self.page <= MAX_PAGE:
            raise ValueError(f"page must be between 1 and {MAX_PAGE}")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, total: int) -> Pagination:
        """Pagination metadata for a filter matching `total` posts."""
        total_pages = math.ceil(total / self.limit)
        return Pagination(
            current_page=self.page,
            total_pages=total_pages,
            total_blogs=total,
            has_next=self.page < total_pages,
            has_prev=self.page > 1,
        )


def page_query(conditions: List[ColumnElement[bool]], window: PageWindow) -> Select:
    """SELECT of one page of posts, newest first."""
    return (
        select(Blog)
        .where(*conditions)
        .order_by(desc(Blog.created_at), desc(Blog.id))
        .offset(window.skip)
        .limit(window.limit)
    )


def count_query(conditions: List[ColumnElement[bool]]) -> Select:
    """SELECT COUNT(*) over the same conditions as page_query."""
    return select(func.count()).select_from(Blog).where(*conditions)
