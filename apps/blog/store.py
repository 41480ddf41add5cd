"""
Blog post store operations.

Each operation touches a single row in a single statement, so there is no
multi-entity transaction to manage. The only retry is on slug collisions.
"""
import os
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.blog.models import BlogPost
from apps.blog.slugs import allocate, pick_base
from apps.images.store import image_exists, parse_image_url
from apps.shared.errors import (
    Conflict,
    NotFound,
    StorageError,
    ValidationError,
    log_and_sanitize_error,
)
from apps.shared.ids import is_storable_id
from apps.shared.insert import insert_unless_exists

logger = logging.getLogger(__name__)

# How many times to re-probe after losing a slug race to a concurrent insert
SLUG_INSERT_ATTEMPTS = int(os.getenv("SLUG_INSERT_ATTEMPTS", "5"))


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None


def create_post(
    db: Session,
    title: Optional[str],
    slug: Optional[str] = None,
    excerpt: Optional[str] = None,
    content: Optional[str] = None,
    cover_image_url: Optional[str] = None,
) -> BlogPost:
    """
    Create a post and return the stored row.

    Raises:
        ValidationError: title missing or blank
        Conflict: every attempt to claim a slug lost to a concurrent insert
        StorageError: the database failed
    """
    if not title or not title.strip():
        raise ValidationError("Title is required")

    base = pick_base(title, slug)
    cover_image_url = _blank_to_none(cover_image_url)

    try:
        cover_image_id = parse_image_url(cover_image_url)
        if cover_image_id is not None and not image_exists(db, cover_image_id):
            cover_image_id = None

        post_id = None
        for attempt in range(1, SLUG_INSERT_ATTEMPTS + 1):
            final_slug = allocate(db, base)
            post_id = insert_unless_exists(
                db,
                BlogPost,
                "slug",
                {
                    "title": title,
                    "slug": final_slug,
                    "excerpt": _blank_to_none(excerpt),
                    "content": _blank_to_none(content),
                    "cover_image_url": cover_image_url,
                    "cover_image_id": cover_image_id,
                },
            )
            if post_id is not None:
                break
            logger.warning(
                f"Slug '{final_slug}' was claimed concurrently "
                f"(attempt {attempt}/{SLUG_INSERT_ATTEMPTS})"
            )

        if post_id is None:
            db.rollback()
            raise Conflict("Could not allocate a unique slug, please retry")

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        message, _ = log_and_sanitize_error(e, "Create post", "Failed to create blog")
        raise StorageError(message) from e

    post = db.get(BlogPost, post_id)
    logger.info(f"Created post {post.id} with slug '{post.slug}'")
    return post


def list_posts(db: Session, limit: Optional[int] = None) -> list[BlogPost]:
    """
    Posts newest first. A positive limit truncates the list; None, zero or
    a negative limit returns everything.
    """
    query = db.query(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
    if limit is not None and limit > 0:
        query = query.limit(limit)
    return query.all()


def get_post_by_slug(db: Session, slug: str) -> BlogPost:
    """Load a full post by slug; raises NotFound if there is none."""
    post = db.query(BlogPost).filter(BlogPost.slug == slug).first()
    if not post:
        raise NotFound("Not found")
    return post


def delete_post(db: Session, post_id: int) -> None:
    """Delete a post by id. Deleting an id that doesn't exist is not an error."""
    if not is_storable_id(post_id):
        return

    try:
        deleted = db.query(BlogPost).filter(BlogPost.id == post_id).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        message, _ = log_and_sanitize_error(e, "Delete post", "Failed to delete blog")
        raise StorageError(message) from e

    if deleted:
        logger.info(f"Deleted post {post_id}")
