"""
SPA Images Backend: Image SQLAlchemy Model
===========================================

What:  ORM model representing the `images` table.
How:   Inherits from the shared DeclarativeBase; created on startup by
       database.create_tables().
Who:   Used by ImageService for every storage operation.

Table layout:
    id           INTEGER, autoincrement primary key
    image_url    long text (data:image/... base64 payloads can be large)
    description  text, nullable
    rating       integer
    position     integer, default 0
"""

from typing import Optional

from sqlalchemy import Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from spa_images.database import Base


class Image(Base):
    """
    One image shown by the SPA.

    Lifecycle:
        1. Created by POST /images (position 0 unless given)
        2. Fully replaced by PUT /images/{id}
        3. Position changed in bulk by ImageService.reorder_images()
        4. Removed by DELETE /images/{id}

    Field rules (url format, rating range, description length) are enforced
    by services.validation before any write; the table itself is permissive.
    """

    __tablename__ = "images"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Display order: position ASC, then id DESC. Not unique.
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, position={self.position}, rating={self.rating})>"
