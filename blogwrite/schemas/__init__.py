"""
Blogwrite Backend — Pydantic Request/Response Schemas
======================================================

Schemas are the API contract and are kept separate from the ORM models.
Wire format is camelCase (featuredImage, createdAt, totalPages); Python code
uses snake_case field names (populate_by_name=True).
"""
