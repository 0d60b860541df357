"""Repository classes"""

from movie_recommendation_service.repos.catalog_repository import CatalogRepository
from movie_recommendation_service.repos.interaction_repository import InteractionRepository

__all__ = [
    "CatalogRepository",
    "InteractionRepository",
]
