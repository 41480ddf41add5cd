"""Pydantic schemas for the Images API."""
from pydantic import BaseModel


class ImageUploadResponse(BaseModel):
    """Response after successful image upload."""
    id: int
    url: str
