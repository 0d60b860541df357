"""Result caching"""

from movie_recommendation_service.cache.result_cache import NullResultCache, ResultCache

__all__ = ["ResultCache", "NullResultCache"]
