"""
Slug generation for blog posts.

normalize() is pure; allocate() probes the database for the first free
variant (base, base-1, base-2, ...). The probe only picks a likely-free
name: the unique index on blogs.slug is what guarantees uniqueness, and the
store retries when an insert loses a race.
"""
import re
from itertools import count
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from apps.blog.models import BlogPost

# Used when neither the provided slug nor the title leaves any usable characters
FALLBACK_SLUG = "post"

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def normalize(value: str) -> str:
    """
    Turn arbitrary text into a URL-safe slug.

    >>> normalize("  Hello, World!  ")
    'hello-world'
    """
    slug = value.lower()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def pick_base(title: str, provided_slug: Optional[str] = None) -> str:
    """Choose the base slug: the provided slug if usable, else the title."""
    if provided_slug and provided_slug.strip():
        base = normalize(provided_slug)
        if base:
            return base
    return normalize(title) or FALLBACK_SLUG


def candidates(base: str) -> Iterator[str]:
    """Yield base, base-1, base-2, ..."""
    yield base
    for suffix in count(1):
        yield f"{base}-{suffix}"


def slug_exists(db: Session, slug: str) -> bool:
    return db.query(BlogPost.id).filter(BlogPost.slug == slug).first() is not None


def allocate(db: Session, base: str) -> str:
    """Return the first candidate for base that no existing post uses."""
    for candidate in candidates(base):
        if not slug_exists(db, candidate):
            return candidate
