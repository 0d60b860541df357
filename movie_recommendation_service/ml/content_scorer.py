"""Content-based scoring against a user's preference profile."""
import logging
from typing import Dict, Iterable

from movie_recommendation_service.ml.feature_builder import PreferenceProfile, build_item_features
from movie_recommendation_service.ml.similarity import cosine_similarity
from movie_recommendation_service.types import CatalogItem

logger = logging.getLogger(__name__)


class ContentScorer:
    """Score items by how closely their features match a preference profile."""

    def score(
        self,
        profile: PreferenceProfile,
        candidate_items: Iterable[CatalogItem]
    ) -> Dict[int, float]:
        """
        Cosine similarity of each candidate's feature vector to the profile.

        Args:
            profile: User preference profile
            candidate_items: Items to score

        Returns:
            Mapping of item id to similarity; empty for an empty profile
        """
        if not profile:
            return {}

        return {
            item.id: cosine_similarity(profile, build_item_features(item))
            for item in candidate_items
        }
