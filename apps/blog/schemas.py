"""
Pydantic schemas for the Blog API.

Field names are camelCase on the wire (coverImageUrl, createdAt, ...);
requests may use either camelCase or snake_case.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BlogPostCreate(CamelModel):
    """
    Schema for creating a post.

    Every field is optional here so that a missing title is reported as
    "Title is required" by the store rather than as a schema error.
    """
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    cover_image_url: Optional[str] = None

    @field_validator("title", "slug", "excerpt", "content", "cover_image_url", mode="before")
    @classmethod
    def coerce_to_text(cls, value: Any) -> Any:
        """Accept numbers and booleans by converting them to strings."""
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value


class BlogPostSummary(CamelModel):
    """Listing entry. Leaves out content to keep listings small."""
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class BlogPostResponse(BlogPostSummary):
    """Full post, returned on create and lookup by slug."""
    content: Optional[str] = None
    cover_image_id: Optional[int] = None
    updated_at: Optional[datetime] = None


class DeleteResponse(BaseModel):
    ok: bool = True
