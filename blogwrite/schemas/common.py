"""
Blogwrite Backend — Shared Schemas
===================================

What:  Building blocks used by several endpoints: the camelCase base model,
       pagination metadata, plain message bodies, error and health responses.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Width of the featured_image and avatar columns
MAX_URL_LENGTH = 2048


class CamelModel(BaseModel):
    """Base for every wire schema: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    """
    Page-window metadata for list endpoints.

    total_blogs comes from a separate COUNT query over the same filter as the
    page query, so it may disagree with the page under concurrent writes.
    """

    current_page: int = Field(description="1-based page number that was requested")
    total_pages: int = Field(description="ceil(totalBlogs / limit); 0 when nothing matches")
    total_blogs: int = Field(description="Number of posts matching the filter")
    has_next: bool
    has_prev: bool


class MessageResponse(CamelModel):
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "title", "message": "Title is required"}],
            "request_id": "550e8400"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[Dict[str, str]]] = Field(
        default=None, description="Field-level validation messages"
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    message: str = Field(default="API is running!")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
