"""SQLAlchemy models"""

from movie_recommendation_service.models.base import Base
from movie_recommendation_service.models.catalog_item import CatalogItemRecord, Genre, item_genres
from movie_recommendation_service.models.interactions import ImplicitSignalRecord, RatingRecord

__all__ = [
    "Base",
    "CatalogItemRecord",
    "Genre",
    "ImplicitSignalRecord",
    "RatingRecord",
    "item_genres",
]
