"""
Blog database models.

Stores blog posts with markdown content and an optional cover image.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index, func

from apps.shared.database import Base


class BlogPost(Base):
    """
    Blog post.

    - slug is unique and never changes after creation
    - cover_image_url is either an external URL or an /images/{id} path
    - cover_image_id is a weak link to the images table: set when the cover
      URL points at a stored image, nulled if that image is deleted
    """
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    slug = Column(Text, unique=True, nullable=False)
    excerpt = Column(Text)
    content = Column(Text)  # Markdown, rendered client-side
    cover_image_url = Column(Text)
    cover_image_id = Column(Integer, ForeignKey("images.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("idx_blogs_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<BlogPost id={self.id} slug={self.slug!r}>"
