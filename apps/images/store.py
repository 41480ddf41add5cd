"""
Image blob store operations.

Images are addressed by their numeric id and served from /images/{id}.
"""
import os
import re
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.images.models import Image
from apps.shared.errors import (
    NotFound,
    PayloadTooLarge,
    StorageError,
    log_and_sanitize_error,
)
from apps.shared.ids import is_storable_id

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "upload"
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))  # 10 MB

IMAGE_PATH_PREFIX = "/images"
# Older posts reference the /api/images/{id} form
_IMAGE_PATH = re.compile(r"^(?:/api)?/images/(\d+)$")


def image_url(image_id: int) -> str:
    """Retrieval path for a stored image."""
    return f"{IMAGE_PATH_PREFIX}/{image_id}"


def parse_image_url(url: Optional[str]) -> Optional[int]:
    """Return the image id if url points into the blob store, else None."""
    if not url:
        return None
    match = _IMAGE_PATH.match(url.strip())
    if not match:
        return None
    image_id = int(match.group(1))
    return image_id if is_storable_id(image_id) else None


def store_image(
    db: Session,
    data: bytes,
    mime_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> Image:
    """Persist an uploaded image and return the stored row."""
    if len(data) > MAX_UPLOAD_BYTES:
        raise PayloadTooLarge(
            f"File too large. Max size: {MAX_UPLOAD_BYTES // (1024 * 1024)} MB"
        )

    image = Image(
        filename=filename or DEFAULT_FILENAME,
        mime_type=mime_type or DEFAULT_MIME_TYPE,
        data=data,
    )

    try:
        db.add(image)
        db.commit()
        db.refresh(image)
    except SQLAlchemyError as e:
        db.rollback()
        message, _ = log_and_sanitize_error(e, "Image upload", "Failed to upload image")
        raise StorageError(message) from e

    logger.info(f"Stored image {image.id} ({image.mime_type}, {len(data)} bytes)")
    return image


def fetch_image(db: Session, image_id: int) -> Image:
    """Load an image by id; raises NotFound if it doesn't exist."""
    if not is_storable_id(image_id):
        raise NotFound("Not found")
    image = db.get(Image, image_id)
    if image is None:
        raise NotFound("Not found")
    return image


def image_exists(db: Session, image_id: int) -> bool:
    if not is_storable_id(image_id):
        return False
    return db.query(Image.id).filter(Image.id == image_id).first() is not None
