"""Repository for reading catalog items."""

import logging
from datetime import UTC, datetime
from typing import Iterable, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from movie_recommendation_service.models import CatalogItemRecord
from movie_recommendation_service.types import CatalogItem, ContentType

logger = logging.getLogger(__name__)


def _to_content_type(value: Optional[int]) -> Optional[ContentType]:
    """Map a stored classification to ContentType; unknown values count as unclassified."""
    if value is None:
        return None
    try:
        return ContentType(value)
    except ValueError:
        logger.warning(f"Unknown content type {value!r}, treating item as unclassified")
        return None


def to_catalog_item(record: CatalogItemRecord) -> CatalogItem:
    """Convert an ORM row into the engine's immutable CatalogItem."""
    content_type = _to_content_type(record.content_type)

    return CatalogItem(
        id=record.id,
        title=record.title,
        year=record.year,
        content_type=content_type,
        genre_ids=frozenset(genre.id for genre in record.genres),
        director=record.director,
        view_count=record.view_count or 0,
        average_rating=record.average_rating,
        created_at=record.created_at,
    )


class CatalogRepository:
    """
    Read-only access to catalog items.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, item_id: int) -> Optional[CatalogItem]:
        """Get a catalog item by ID."""
        record = self.db.query(CatalogItemRecord).filter(CatalogItemRecord.id == item_id).first()
        return to_catalog_item(record) if record is not None else None

    # noinspection PyTypeChecker
    def list_items(self, exclude_ids: Optional[Iterable[int]] = None) -> List[CatalogItem]:
        """
        List catalog items in catalog (id) order.

        Args:
            exclude_ids: Item IDs to leave out

        Returns:
            List of CatalogItem
        """
        query = self.db.query(CatalogItemRecord)

        excluded = set(exclude_ids or ())
        if excluded:
            query = query.filter(CatalogItemRecord.id.notin_(excluded))

        records = query.order_by(CatalogItemRecord.id).all()
        return [to_catalog_item(record) for record in records]

    # noinspection PyTypeChecker
    def list_items_created_since(self, since: datetime) -> List[CatalogItem]:
        """List items added to the catalog at or after ``since``, newest first."""
        # Stored timestamps are naive UTC
        if since.tzinfo is not None:
            since = since.astimezone(UTC).replace(tzinfo=None)

        records = (
            self.db.query(CatalogItemRecord)
            .filter(CatalogItemRecord.created_at >= since)
            .order_by(desc(CatalogItemRecord.created_at), CatalogItemRecord.id)
            .all()
        )
        return [to_catalog_item(record) for record in records]
