"""
SPA Images Backend: Image Service (Storage Collaborator)
=========================================================

What:  The six storage operations over the `images` table: list, create,
       get, update, delete and reorder.
How:   Async SQLAlchemy statements on the session handed in by the caller.
       Every write is committed before success is reported.
Who:   Called by the image route handlers (list/create/get/update/delete).
       reorder_images() has no HTTP route; it is kept for callers that
       manage display order directly.

Error Handling Strategy:
    Driver and constraint errors never leave this module as-is. They are
    logged, the transaction is rolled back, and the operation reports
    failure: False for writes, None for get. Listing is the exception,
    since there is no "empty" answer that would be honest, so it raises
    DatabaseError (500).

    update/delete return False both for "no such id" and for a failed
    statement; callers cannot tell these apart.

Design Decision:
    ImageService is stateless and receives the session per call, so each
    request works on its own session and tests can pass a mock.
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import asc, delete, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from spa_images.exceptions import DatabaseError
from spa_images.models.image import Image
from spa_images.services.validation import to_number

logger = logging.getLogger(__name__)


def _to_int(value: Any, field: str) -> int:
    number = to_number(value)
    if number is None or not math.isfinite(number) or not number.is_integer():
        raise ValueError(f"{field} is not an integer: {value!r}")
    return int(number)


def _to_position(value: Any) -> int:
    # Absent, null, 0, "" and false all mean "first"
    if not value:
        return 0
    return _to_int(value, "position")


def _to_description(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        raise ValueError(f"description is not a scalar: {type(value).__name__}")
    return str(value)


def _column_values(payload: Mapping[str, Any]) -> dict:
    """Map a validated payload onto the writable columns."""
    return {
        "image_url": payload.get("image_url"),
        "description": _to_description(payload.get("description")),
        "rating": _to_int(payload.get("rating"), "rating"),
        "position": _to_position(payload.get("position")),
    }


class ImageService:
    """
    Storage operations for image records.

    Responsibilities:
        - list_images():    all images, position ASC then id DESC
        - create_image():   insert, position defaults to 0
        - get_image():      single image or None
        - update_image():   full replace of url/description/rating/position
        - delete_image():   remove by id
        - reorder_images(): bulk position update, not validated
    """

    async def list_images(self, db: AsyncSession) -> List[Image]:
        """
        Return every image in display order.

        Query plan:
            SELECT * FROM images ORDER BY position ASC, id DESC

        Raises:
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await db.execute(
                select(Image).order_by(asc(Image.position), desc(Image.id))
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing images: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve images. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def create_image(self, db: AsyncSession, payload: Mapping[str, Any]) -> bool:
        """
        Insert a new image.

        Args:
            db: Async database session
            payload: Validated image payload (image_url, rating, optional
                     description and position)

        Returns:
            True once the row is committed, False if anything failed.
        """
        try:
            image = Image(**_column_values(payload))
            db.add(image)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Failed to create image: %s", str(e), exc_info=True)
            return False

        logger.info("Image %s created (position=%s)", image.id, image.position)
        return True

    async def get_image(self, db: AsyncSession, image_id: Optional[int]) -> Optional[Image]:
        """
        Fetch one image by id.

        Args:
            image_id: Parsed id, or None when the path segment was not a
                      number (never matches a record, no query is run)

        Returns:
            The Image, or None when it does not exist or the lookup failed.
        """
        if image_id is None:
            return None

        try:
            result = await db.execute(select(Image).where(Image.id == image_id))
            return result.scalar_one_or_none()
        except Exception as e:
            await db.rollback()
            logger.error("Database error fetching image %s: %s", image_id, str(e))
            return None

    async def update_image(
        self,
        db: AsyncSession,
        image_id: Optional[int],
        payload: Mapping[str, Any],
    ) -> bool:
        """
        Replace url, description, rating and position of an image.

        Position falls back to 0 when the payload omits it, as on create.

        Returns:
            True if a row was updated and committed; False when no row has
            this id or the statement failed.
        """
        if image_id is None:
            return False

        try:
            result = await db.execute(
                update(Image)
                .where(Image.id == image_id)
                .values(**_column_values(payload))
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Failed to update image %s: %s", image_id, str(e), exc_info=True)
            return False

        return result.rowcount > 0

    async def delete_image(self, db: AsyncSession, image_id: Optional[int]) -> bool:
        """
        Delete an image by id.

        Returns:
            True if a row was deleted; False when no row has this id or the
            statement failed.
        """
        if image_id is None:
            return False

        try:
            result = await db.execute(delete(Image).where(Image.id == image_id))
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Failed to delete image %s: %s", image_id, str(e), exc_info=True)
            return False

        return result.rowcount > 0

    async def reorder_images(
        self, db: AsyncSession, items: Iterable[Mapping[str, Any]]
    ) -> bool:
        """
        Assign new positions to several images at once.

        Args:
            items: Raw {"id": ..., "position": ...} pairs. They are not
                   validated; ids that match nothing are skipped silently.

        Returns:
            True when every statement ran and the transaction committed,
            False otherwise (nothing is applied in that case). No per-item
            outcome is reported.
        """
        try:
            count = 0
            for item in items:
                await db.execute(
                    update(Image)
                    .where(Image.id == _to_int(item["id"], "id"))
                    .values(position=_to_int(item["position"], "position"))
                )
                count += 1
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Failed to reorder images: %s", str(e), exc_info=True)
            return False

        logger.info("Reordered %d images", count)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
