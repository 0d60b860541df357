"""Service classes"""

from .data_source import RecommendationDataSource, SqlAlchemyDataSource
from .fallback_ranker import FallbackRanker
from .hybrid_ranker import HybridRanker
from .recommendation_service import RecommendationService, build_recommendation_service

__all__ = [
    "FallbackRanker",
    "HybridRanker",
    "RecommendationDataSource",
    "RecommendationService",
    "SqlAlchemyDataSource",
    "build_recommendation_service",
]
