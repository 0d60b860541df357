"""User-based collaborative filtering with mean-centred neighbour ratings."""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

import numpy as np

from movie_recommendation_service.ml.similarity import cosine_similarity_many
from movie_recommendation_service.types import CatalogItem, ExplicitRating

logger = logging.getLogger(__name__)

MAX_SCORE = 5.0


class CollaborativeScorer:
    """Predict a user's affinity for items from the ratings of similar users."""

    def __init__(self, min_similarity: float = 0.1, max_neighbors: int = 50):
        """
        Initialize collaborative scorer.

        Args:
            min_similarity: Users at or below this similarity are ignored
            max_neighbors: Number of most similar users kept as neighbours
        """
        self.min_similarity = min_similarity
        self.max_neighbors = max_neighbors

    def build_rating_vectors(
        self,
        ratings: Iterable[ExplicitRating],
        exclude_user_id: str | None = None
    ) -> Dict[str, Dict[int, int]]:
        """Group ratings into one item id -> score vector per user."""
        vectors: Dict[str, Dict[int, int]] = defaultdict(dict)
        for rating in ratings:
            if rating.user_id == exclude_user_id:
                continue
            vectors[rating.user_id][rating.item_id] = rating.score
        return dict(vectors)

    def find_neighbors(
        self,
        target_vector: Dict[int, int],
        rating_vectors: Dict[str, Dict[int, int]]
    ) -> List[Tuple[str, float]]:
        """
        Find the users most similar to the target.

        Args:
            target_vector: Target user's item id -> score mapping
            rating_vectors: Other users' rating vectors keyed by user id

        Returns:
            (user_id, similarity) pairs, most similar first
        """
        if not target_vector or not rating_vectors:
            return []

        user_ids = sorted(rating_vectors)
        similarities = cosine_similarity_many(
            target_vector,
            [rating_vectors[u] for u in user_ids]
        )

        neighbors = [
            (user_id, similarity)
            for user_id, similarity in zip(user_ids, similarities)
            if similarity > self.min_similarity
        ]
        neighbors.sort(key=lambda pair: (-pair[1], pair[0]))
        return neighbors[:self.max_neighbors]

    def score(
        self,
        target_user_id: str,
        target_ratings: Iterable[ExplicitRating],
        candidate_items: Iterable[CatalogItem],
        all_ratings: Iterable[ExplicitRating]
    ) -> Dict[int, float]:
        """
        Predict normalized scores for candidate items.

        Args:
            target_user_id: User the prediction is for
            target_ratings: That user's explicit ratings
            candidate_items: Items to score
            all_ratings: Every explicit rating in the store (target user's
                rows are skipped)

        Returns:
            Mapping of item id to score in [0, 1]; items no neighbour rated
            are left out
        """
        target_vector = {r.item_id: r.score for r in target_ratings}
        if not target_vector:
            return {}

        rating_vectors = self.build_rating_vectors(all_ratings, exclude_user_id=target_user_id)
        neighbors = self.find_neighbors(target_vector, rating_vectors)
        if not neighbors:
            logger.debug(f"No neighbours above {self.min_similarity} for user {target_user_id}")
            return {}

        neighbor_means = {
            user_id: float(np.mean(list(rating_vectors[user_id].values())))
            for user_id, _ in neighbors
        }
        target_mean = float(np.mean(list(target_vector.values())))

        scores: Dict[int, float] = {}
        for item in candidate_items:
            weighted_sum = 0.0
            similarity_mass = 0.0

            for user_id, similarity in neighbors:
                rating = rating_vectors[user_id].get(item.id)
                if rating is None:
                    continue
                weighted_sum += similarity * (rating - neighbor_means[user_id])
                similarity_mass += abs(similarity)

            if similarity_mass > 0:
                predicted = target_mean + weighted_sum / similarity_mass
                scores[item.id] = float(np.clip(predicted, 0.0, MAX_SCORE)) / MAX_SCORE

        logger.debug(
            f"Collaborative scores for user {target_user_id}: "
            f"{len(neighbors)} neighbours, {len(scores)} items covered"
        )
        return scores
