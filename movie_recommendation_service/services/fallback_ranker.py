"""Genre-overlap and popularity rankings that need no rating data."""
import asyncio
import logging
from typing import AbstractSet, Iterable, List

from movie_recommendation_service.services.data_source import RecommendationDataSource
from movie_recommendation_service.types import CatalogItem, SignalKind

logger = logging.getLogger(__name__)


def rank_by_popularity(items: Iterable[CatalogItem]) -> List[CatalogItem]:
    """Order by view count, then aggregate rating, keeping catalog order on ties."""
    return sorted(items, key=lambda item: (-item.view_count, -(item.average_rating or 0.0)))


def rank_by_genre_overlap(
    items: Iterable[CatalogItem],
    genre_ids: AbstractSet[int]
) -> List[CatalogItem]:
    """Order by number of shared genres, then popularity."""
    return sorted(
        items,
        key=lambda item: (
            -len(item.genre_ids & genre_ids),
            -item.view_count,
            -(item.average_rating or 0.0),
        )
    )


class FallbackRanker:
    """
    Simple content ranking used when the hybrid ranker fails or under-yields.

    Reads only catalog rows and implicit signals, so it keeps working when
    the rating data is empty or unreadable.
    """

    def __init__(self, data_source: RecommendationDataSource):
        self.data_source = data_source

    async def popular(self, limit: int, exclude_ids: Iterable[int] = ()) -> List[CatalogItem]:
        """Most viewed items, best rated first among equals."""
        if limit <= 0:
            return []
        items = await self.data_source.list_catalog_items(exclude_ids=list(exclude_ids))
        return rank_by_popularity(items)[:limit]

    async def recommend(self, user_id: str, limit: int) -> List[CatalogItem]:
        """
        Rank unwatched items by overlap with the genres of the user's
        favorite and watched items.

        Items sharing no genre follow in popularity order, so the list is
        filled up to ``limit`` whenever the catalog allows.

        Args:
            user_id: User ID
            limit: Maximum number of items

        Returns:
            List of CatalogItem
        """
        if limit <= 0:
            return []

        favorite_ids, watched_ids = await asyncio.gather(
            self.data_source.list_implicit_signals(user_id, SignalKind.FAVORITE),
            self.data_source.list_implicit_signals(user_id, SignalKind.WATCHED),
        )

        catalog = await self.data_source.list_catalog_items()
        signal_ids = set(favorite_ids) | set(watched_ids)
        watched = set(watched_ids)

        preferred_genres = frozenset(
            genre_id
            for item in catalog if item.id in signal_ids
            for genre_id in item.genre_ids
        )
        candidates = [item for item in catalog if item.id not in watched]

        logger.info(
            f"Fallback ranking for user {user_id}: {len(preferred_genres)} preferred genres, "
            f"{len(candidates)} candidates"
        )
        return rank_by_genre_overlap(candidates, preferred_genres)[:limit]

    async def similar_to(self, item_id: int, limit: int) -> List[CatalogItem]:
        """
        Items sharing at least one genre with the seed, most overlap first.

        Args:
            item_id: Seed item ID
            limit: Maximum number of items

        Returns:
            List of CatalogItem; empty when the seed doesn't exist
        """
        if limit <= 0:
            return []

        seed = await self.data_source.get_catalog_item(item_id)
        if seed is None:
            logger.warning(f"Item {item_id} not found in catalog")
            return []

        items = await self.data_source.list_catalog_items(exclude_ids=[item_id])
        related = [
            item for item in items
            if item.id != item_id and item.genre_ids & seed.genre_ids
        ]
        return rank_by_genre_overlap(related, seed.genre_ids)[:limit]
