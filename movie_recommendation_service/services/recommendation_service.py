"""Public recommendation entry points with caching and graceful degradation."""
import logging
from datetime import UTC, datetime, timedelta
from typing import Callable, List, Optional

from movie_recommendation_service.cache.result_cache import (
    NEW_RELEASES,
    RECOMMENDATIONS,
    SIMILAR_ITEMS,
    TRENDING,
    NullResultCache,
    ResultCache,
)
from movie_recommendation_service.config import (
    get_cache_max_entries,
    get_max_candidates,
    get_min_yield_ratio,
    get_recommendation_cache_ttl,
    get_similar_cache_ttl,
    use_result_cache,
)
from movie_recommendation_service.services.data_source import RecommendationDataSource, SqlAlchemyDataSource
from movie_recommendation_service.services.fallback_ranker import FallbackRanker, rank_by_popularity
from movie_recommendation_service.services.hybrid_ranker import HybridRanker
from movie_recommendation_service.types import CatalogItem

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RecommendationService:
    """
    Recommendation and similar-item lists for callers such as the HTTP API.

    The hybrid ranker is tried first. When it errors or fills less than
    ``min_yield_ratio`` of the requested limit, the fallback ranker takes
    over, and the bare popularity list after that. Callers always get a
    list, never an exception.
    """

    def __init__(
            self,
            data_source: RecommendationDataSource,
            hybrid_ranker: Optional[HybridRanker] = None,
            fallback_ranker: Optional[FallbackRanker] = None,
            cache: Optional[ResultCache] = None,
            min_yield_ratio: float = 0.7,
            clock: Callable[[], datetime] = _utc_now
    ):
        """
        Initialize the recommendation service.

        Args:
            data_source: Read-only store of ratings, signals and catalog rows
            hybrid_ranker: Collaborative + content ranker
            fallback_ranker: Genre-overlap / popularity ranker
            cache: Result cache (None disables caching)
            min_yield_ratio: Share of ``limit`` the hybrid result must fill
            clock: Returns the current time, for trending/new releases
        """
        self.data_source = data_source
        self.hybrid_ranker = hybrid_ranker or HybridRanker(data_source)
        self.fallback_ranker = fallback_ranker or FallbackRanker(data_source)
        self.cache = cache if cache is not None else NullResultCache()
        self.min_yield_ratio = min_yield_ratio
        self.clock = clock

    async def _popular_or_empty(self, limit: int, exclude_ids: List[int]) -> List[CatalogItem]:
        try:
            return await self.fallback_ranker.popular(limit, exclude_ids=exclude_ids)
        except Exception as e:
            logger.error(f"Popularity fallback failed: {str(e)}", exc_info=True)
            return []

    async def recommend(self, user_id: Optional[str], limit: int = 10) -> List[CatalogItem]:
        """
        Get recommendations for a user, or popular items for anonymous visitors.

        Args:
            user_id: User ID (None or blank for anonymous)
            limit: Maximum number of items

        Returns:
            Up to ``limit`` catalog items, best first
        """
        if limit <= 0:
            return []

        subject = (user_id or "").strip() or ANONYMOUS
        cached = self.cache.get(RECOMMENDATIONS, subject, limit)
        if cached is not None:
            logger.info(f"Returning cached recommendations for user: {subject}")
            return list(cached)

        if subject == ANONYMOUS:
            try:
                recommendations = await self.fallback_ranker.popular(limit)
            except Exception as e:
                logger.error(f"Error getting popular items: {str(e)}", exc_info=True)
                return []
            self.cache.set(RECOMMENDATIONS, subject, limit, recommendations)
            return recommendations

        try:
            ranked = await self.hybrid_ranker.recommend(subject, limit)
            if len(ranked) >= limit * self.min_yield_ratio:
                recommendations = [r.item for r in ranked]
                self.cache.set(RECOMMENDATIONS, subject, limit, recommendations)
                logger.info(f"Generated {len(recommendations)} hybrid recommendations for user: {subject}")
                return recommendations

            logger.info(
                f"Hybrid recommendations insufficient ({len(ranked)}/{limit}), "
                f"falling back to genre-based recommendations"
            )
        except Exception as e:
            logger.warning(
                f"Error in hybrid recommendations for user {subject}, falling back: {str(e)}",
                exc_info=True
            )

        try:
            recommendations = await self.fallback_ranker.recommend(subject, limit)
        except Exception as e:
            logger.error(f"Fallback recommendations failed for user {subject}: {str(e)}", exc_info=True)
            return await self._popular_or_empty(limit, exclude_ids=[])

        self.cache.set(RECOMMENDATIONS, subject, limit, recommendations)
        logger.info(f"Generated {len(recommendations)} fallback recommendations for user: {subject}")
        return recommendations

    async def similar_to(self, item_id: int, limit: int = 6) -> List[CatalogItem]:
        """
        Get items similar to a catalog item.

        Args:
            item_id: Seed item ID
            limit: Maximum number of items

        Returns:
            Up to ``limit`` catalog items, never the seed itself
        """
        if limit <= 0:
            return []

        cached = self.cache.get(SIMILAR_ITEMS, item_id, limit)
        if cached is not None:
            return list(cached)

        try:
            ranked = await self.hybrid_ranker.similar_to(item_id, limit)
            if ranked:
                similar = [r.item for r in ranked]
                self.cache.set(SIMILAR_ITEMS, item_id, limit, similar)
                logger.info(f"Generated {len(similar)} similar items for item: {item_id}")
                return similar
        except Exception as e:
            logger.warning(
                f"Error computing similar items for item {item_id}, falling back: {str(e)}",
                exc_info=True
            )

        try:
            similar = await self.fallback_ranker.similar_to(item_id, limit)
        except Exception as e:
            logger.error(f"Fallback similar items failed for item {item_id}: {str(e)}", exc_info=True)
            return await self._popular_or_empty(limit, exclude_ids=[item_id])

        self.cache.set(SIMILAR_ITEMS, item_id, limit, similar)
        return similar

    async def trending(self, limit: int = 10, days: int = 30) -> List[CatalogItem]:
        """Most viewed items among those added in the last ``days`` days."""
        if limit <= 0:
            return []

        cached = self.cache.get(TRENDING, days, limit)
        if cached is not None:
            return list(cached)

        since = self.clock() - timedelta(days=days)
        try:
            items = await self.data_source.list_catalog_items_created_since(since)
        except Exception as e:
            logger.error(f"Error getting trending items: {str(e)}", exc_info=True)
            return []

        trending = rank_by_popularity(items)[:limit]
        self.cache.set(TRENDING, days, limit, trending)
        return trending

    async def new_releases(self, limit: int = 10, days: int = 7) -> List[CatalogItem]:
        """Items added in the last ``days`` days, newest first."""
        if limit <= 0:
            return []

        cached = self.cache.get(NEW_RELEASES, days, limit)
        if cached is not None:
            return list(cached)

        since = self.clock() - timedelta(days=days)
        try:
            items = await self.data_source.list_catalog_items_created_since(since)
        except Exception as e:
            logger.error(f"Error getting new releases: {str(e)}", exc_info=True)
            return []

        releases = sorted(
            items,
            key=lambda item: (item.created_at or datetime.min, item.view_count),
            reverse=True
        )[:limit]
        self.cache.set(NEW_RELEASES, days, limit, releases)
        return releases


def build_recommendation_service(
        data_source: Optional[RecommendationDataSource] = None
) -> RecommendationService:
    """
    Wire a RecommendationService from configuration.

    Args:
        data_source: Data source to use (default: the catalog database)

    Returns:
        Configured RecommendationService
    """
    data_source = data_source or SqlAlchemyDataSource()

    cache: ResultCache
    if use_result_cache():
        cache = ResultCache(
            max_entries=get_cache_max_entries(),
            ttls={
                RECOMMENDATIONS: get_recommendation_cache_ttl(),
                SIMILAR_ITEMS: get_similar_cache_ttl(),
            }
        )
    else:
        cache = NullResultCache()

    service = RecommendationService(
        data_source=data_source,
        hybrid_ranker=HybridRanker(data_source, max_candidates=get_max_candidates()),
        fallback_ranker=FallbackRanker(data_source),
        cache=cache,
        min_yield_ratio=get_min_yield_ratio(),
    )
    logger.info("Initialized RecommendationService")
    return service
