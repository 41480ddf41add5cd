"""
Blog API

Create, list, look up and delete blog posts.
"""
import logging
from typing import Optional, Union

from fastapi import FastAPI, APIRouter, Depends, Query
from sqlalchemy.orm import Session

from apps.shared.database import get_db, init_db, check_db_connection
from apps.shared.auth import get_api_key
from apps.shared.cors import setup_cors
from apps.shared.errors import ValidationError, setup_error_handlers
from apps.shared.headers import setup_response_headers
from apps.shared.ids import parse_positive_id
from apps.blog import store
from apps.blog.schemas import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostSummary,
    DeleteResponse,
)

logger = logging.getLogger(__name__)

# Create tables
init_db()

app = FastAPI(
    title="Blog Service",
    version="1.0.0",
    description="Blog posts with unique slugs and markdown content",
    docs_url="/posts/docs",
    openapi_url="/posts/openapi.json",
)

setup_cors(app)
setup_response_headers(app)
setup_error_handlers(app)

router = APIRouter(prefix="/posts", tags=["posts"])


# Lives outside /posts so it can't shadow a post whose slug is "health"
@app.get("/health")
def health():
    """Health check endpoint - returns service status"""
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog",
        "database": "connected" if db_connected else "disconnected",
    }


@router.get("", response_model=Union[BlogPostResponse, list[BlogPostSummary]])
def list_posts(
    limit: Optional[int] = Query(None, description="Max posts to return; 0 or less means all"),
    slug: Optional[str] = Query(None, description="Return the single post with this slug"),
    db: Session = Depends(get_db),
):
    """
    List posts newest first, without their content.
    With ?slug=... returns that one post in full instead (404 if missing).
    """
    if slug:
        return BlogPostResponse.model_validate(store.get_post_by_slug(db, slug))

    return [BlogPostSummary.model_validate(post) for post in store.list_posts(db, limit)]


@router.get("/{slug}", response_model=BlogPostResponse)
def get_post(slug: str, db: Session = Depends(get_db)):
    """Get a single post by slug, including its content."""
    return store.get_post_by_slug(db, slug)


@router.post("", response_model=BlogPostResponse, status_code=201)
def create_post(
    post_data: Optional[BlogPostCreate] = None,
    api_key: str = Depends(get_api_key),
    db: Session = Depends(get_db),
):
    """
    Create a new post.
    The slug is derived from `slug` if given, otherwise from the title, and
    suffixed -1, -2, ... when already taken.
    """
    post_data = post_data or BlogPostCreate()
    return store.create_post(
        db,
        title=post_data.title,
        slug=post_data.slug,
        excerpt=post_data.excerpt,
        content=post_data.content,
        cover_image_url=post_data.cover_image_url,
    )


@router.delete("/{post_id}", response_model=DeleteResponse)
def delete_post(
    post_id: str,
    api_key: str = Depends(get_api_key),
    db: Session = Depends(get_db),
):
    """Delete a post by numeric id. Succeeds even if the post doesn't exist."""
    parsed_id = parse_positive_id(post_id)
    if parsed_id is None:
        raise ValidationError("Invalid id")

    store.delete_post(db, parsed_id)
    return DeleteResponse(ok=True)


app.include_router(router)
