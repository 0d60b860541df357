"""Hybrid collaborative + content-based ranking."""
import asyncio
import logging
import math
from typing import AbstractSet, Dict, List, Optional, Sequence

from movie_recommendation_service.ml.collaborative_scorer import CollaborativeScorer
from movie_recommendation_service.ml.content_scorer import ContentScorer
from movie_recommendation_service.ml.feature_builder import (
    DEFAULT_UNRATED_WEIGHT,
    build_item_features,
    build_user_profile,
    liked_item_ids,
)
from movie_recommendation_service.ml.similarity import cosine_similarity
from movie_recommendation_service.services.data_source import RecommendationDataSource
from movie_recommendation_service.services.fallback_ranker import rank_by_popularity
from movie_recommendation_service.types import CatalogItem, RankedItem, SignalKind

logger = logging.getLogger(__name__)


def popularity_bonus(view_count: int, weight: float = 0.1) -> float:
    """Small saturating boost for heavily viewed items."""
    return min(1.0, math.log10(max(view_count, 0) + 1) / 10.0) * weight


# noinspection PyMethodMayBeStatic
class HybridRanker:
    """
    Rank catalog items by combining collaborative and content-based scores.

    All working data is loaded from the data source per call; nothing is
    kept between requests.
    """

    def __init__(
            self,
            data_source: RecommendationDataSource,
            collaborative_scorer: Optional[CollaborativeScorer] = None,
            content_scorer: Optional[ContentScorer] = None,
            collaborative_weight: float = 0.6,
            content_weight: float = 0.4,
            popularity_weight: float = 0.1,
            genre_overlap_boost: float = 0.1,
            unrated_weight: float = DEFAULT_UNRATED_WEIGHT,
            max_candidates: int = 5000
    ):
        """
        Initialize the hybrid ranker.

        Args:
            data_source: Read-only store of ratings, signals and catalog rows
            collaborative_scorer: Scorer for user-user collaborative filtering
            content_scorer: Scorer for profile-vs-item similarity
            collaborative_weight: Weight of the collaborative score
            content_weight: Weight of the content score
            popularity_weight: Maximum popularity bonus
            genre_overlap_boost: Bonus per shared genre for similar items
            unrated_weight: Profile weight of liked items the user never rated
            max_candidates: Candidate pool size scored per request
        """
        self.data_source = data_source
        self.collaborative_scorer = collaborative_scorer or CollaborativeScorer()
        self.content_scorer = content_scorer or ContentScorer()
        self.collaborative_weight = collaborative_weight
        self.content_weight = content_weight
        self.popularity_weight = popularity_weight
        self.genre_overlap_boost = genre_overlap_boost
        self.unrated_weight = unrated_weight
        self.max_candidates = max_candidates

    def _cap_candidates(
            self,
            candidates: Sequence[CatalogItem],
            relevant_genres: AbstractSet[int]
    ) -> List[CatalogItem]:
        """
        Bound the pool scored per request.

        Items sharing a relevant genre go first, then the most popular; the
        kept items stay in catalog order.
        """
        if len(candidates) <= self.max_candidates:
            return list(candidates)

        positions = {item.id: i for i, item in enumerate(candidates)}
        prioritized = sorted(
            candidates,
            key=lambda item: (
                not (item.genre_ids & relevant_genres),
                -item.view_count,
                positions[item.id],
            )
        )
        kept = prioritized[:self.max_candidates]
        kept.sort(key=lambda item: positions[item.id])

        logger.info(f"Capped candidate pool from {len(candidates)} to {len(kept)} items")
        return kept

    def _rank(self, scores: Dict[int, float], items: Sequence[CatalogItem], limit: int) -> List[RankedItem]:
        # sorted() is stable, so ties keep catalog order
        ranked = sorted(
            (RankedItem(item=item, score=scores[item.id]) for item in items),
            key=lambda r: -r.score
        )
        return ranked[:limit]

    async def recommend(self, user_id: str, limit: int) -> List[RankedItem]:
        """
        Personalized ranking for a user.

        Users with no ratings and no implicit signals get the popularity
        ranking. Watched items are never recommended.

        Args:
            user_id: User ID
            limit: Maximum number of items

        Returns:
            Up to ``limit`` RankedItem, best first
        """
        if limit <= 0:
            return []

        ratings, watched_ids, favorite_ids = await asyncio.gather(
            self.data_source.list_explicit_ratings(user_id),
            self.data_source.list_implicit_signals(user_id, SignalKind.WATCHED),
            self.data_source.list_implicit_signals(user_id, SignalKind.FAVORITE),
        )

        if not ratings and not watched_ids and not favorite_ids:
            logger.info(f"User {user_id} has no ratings or viewing history, returning popular items")
            catalog = await self.data_source.list_catalog_items()
            return [
                RankedItem(item=item, score=float(item.view_count))
                for item in rank_by_popularity(catalog)[:limit]
            ]

        if ratings:
            catalog, all_ratings = await asyncio.gather(
                self.data_source.list_catalog_items(),
                self.data_source.list_explicit_ratings(),
            )
        else:
            catalog, all_ratings = await self.data_source.list_catalog_items(), []

        watched = set(watched_ids)
        candidates = [item for item in catalog if item.id not in watched]
        if not candidates:
            logger.info(f"User {user_id} has watched the whole catalog")
            return []

        ratings_by_item_id = {r.item_id: r.score for r in ratings}
        liked_ids = liked_item_ids(ratings, watched_ids + favorite_ids)
        liked_items = [item for item in catalog if item.id in liked_ids]
        profile = build_user_profile(liked_items, ratings_by_item_id, self.unrated_weight)

        preferred_genres = frozenset(g for item in liked_items for g in item.genre_ids)
        candidates = self._cap_candidates(candidates, preferred_genres)

        collaborative_scores = self.collaborative_scorer.score(user_id, ratings, candidates, all_ratings)
        content_scores = self.content_scorer.score(profile, candidates)

        combined = {
            item.id: (
                self.collaborative_weight * collaborative_scores.get(item.id, 0.0)
                + self.content_weight * content_scores.get(item.id, 0.0)
                + popularity_bonus(item.view_count, self.popularity_weight)
            )
            for item in candidates
        }

        recommendations = self._rank(combined, candidates, limit)
        logger.info(
            f"✓ Ranked {len(recommendations)} items for user {user_id} "
            f"({len(collaborative_scores)} collaborative, {len(content_scores)} content scores)"
        )
        return recommendations

    async def similar_to(self, item_id: int, limit: int) -> List[RankedItem]:
        """
        Items most similar to a seed item.

        Score is the cosine similarity of feature vectors plus a flat boost
        per shared genre.

        Args:
            item_id: Seed item ID
            limit: Maximum number of items

        Returns:
            Up to ``limit`` RankedItem, never including the seed
        """
        if limit <= 0:
            return []

        seed = await self.data_source.get_catalog_item(item_id)
        if seed is None:
            logger.warning(f"Item {item_id} not found in catalog")
            return []

        items = await self.data_source.list_catalog_items(exclude_ids=[item_id])
        items = [item for item in items if item.id != item_id]
        items = self._cap_candidates(items, seed.genre_ids)

        seed_features = build_item_features(seed)
        scores = {
            item.id: (
                cosine_similarity(seed_features, build_item_features(item))
                + self.genre_overlap_boost * len(seed.genre_ids & item.genre_ids)
            )
            for item in items
        }

        return self._rank(scores, items, limit)
