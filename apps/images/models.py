"""
Image blob database model.

Uploaded images are stored in the database itself and served back by id.
"""
from sqlalchemy import Column, Integer, Text, LargeBinary, DateTime, func

from apps.shared.database import Base


class Image(Base):
    """
    Binary image blob.

    Rows are write-once: data and mime_type never change after insert, so an
    id always refers to the same bytes.
    """
    __tablename__ = "images"

    id = Column(Integer, primary_key=True)
    filename = Column(Text)  # informational only
    mime_type = Column(Text, nullable=False)
    data = Column(LargeBinary, nullable=False)  # BYTEA on PostgreSQL
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Image id={self.id} mime_type={self.mime_type!r}>"
