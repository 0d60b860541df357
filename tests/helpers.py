"""Test helpers shared across test modules."""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from movie_recommendation_service.errors import DataSourceError
from movie_recommendation_service.types import CatalogItem, ContentType, ExplicitRating, SignalKind

NOW = datetime(2026, 10, 19, 12, 0, 0)


def make_item(
        item_id: int,
        genre_ids: Iterable[int] = (),
        view_count: int = 0,
        average_rating: Optional[float] = None,
        year: Optional[int] = None,
        director: Optional[str] = None,
        content_type: Optional[ContentType] = ContentType.MOVIE,
        created_at: Optional[datetime] = None,
        title: Optional[str] = None,
) -> CatalogItem:
    """Build a CatalogItem with sensible defaults."""
    return CatalogItem(
        id=item_id,
        title=title or f"Movie {item_id}",
        year=year,
        content_type=content_type,
        genre_ids=frozenset(genre_ids),
        director=director,
        view_count=view_count,
        average_rating=average_rating,
        created_at=created_at,
    )


class InMemoryDataSource:
    """Data source over plain lists, with switchable failures."""

    def __init__(
            self,
            catalog: List[CatalogItem],
            ratings: Optional[List[ExplicitRating]] = None,
            signals: Optional[Dict[Tuple[str, SignalKind], List[int]]] = None,
    ):
        self.catalog = list(catalog)
        self.ratings = list(ratings or [])
        self.signals = dict(signals or {})
        self.failing: set = set()
        self.calls: List[str] = []

    def _check(self, name: str):
        self.calls.append(name)
        if name in self.failing:
            raise DataSourceError(f"{name} unavailable")

    async def list_explicit_ratings(self, user_id: Optional[str] = None) -> List[ExplicitRating]:
        self._check("list_explicit_ratings")
        return [r for r in self.ratings if user_id is None or r.user_id == user_id]

    async def list_implicit_signals(self, user_id: str, kind: SignalKind) -> List[int]:
        self._check("list_implicit_signals")
        return list(self.signals.get((user_id, kind), []))

    async def get_catalog_item(self, item_id: int) -> Optional[CatalogItem]:
        self._check("get_catalog_item")
        return next((item for item in self.catalog if item.id == item_id), None)

    async def list_catalog_items(self, exclude_ids: Optional[Iterable[int]] = None) -> List[CatalogItem]:
        self._check("list_catalog_items")
        excluded = set(exclude_ids or ())
        return [item for item in self.catalog if item.id not in excluded]

    async def list_catalog_items_created_since(self, since: datetime) -> List[CatalogItem]:
        self._check("list_catalog_items_created_since")
        return [item for item in self.catalog if item.created_at is not None and item.created_at >= since]
