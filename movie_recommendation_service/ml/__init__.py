"""Feature building, similarity and scoring"""

from movie_recommendation_service.ml.collaborative_scorer import CollaborativeScorer
from movie_recommendation_service.ml.content_scorer import ContentScorer
from movie_recommendation_service.ml.feature_builder import build_item_features, build_user_profile
from movie_recommendation_service.ml.similarity import cosine_similarity, cosine_similarity_many

__all__ = [
    "CollaborativeScorer",
    "ContentScorer",
    "build_item_features",
    "build_user_profile",
    "cosine_similarity",
    "cosine_similarity_many",
]
