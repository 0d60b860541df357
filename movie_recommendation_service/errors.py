class RecommendationError(Exception):
    """Base class for errors raised inside the recommendation engine."""

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)


class DataSourceError(RecommendationError):
    """Reading ratings, signals or catalog rows from the store failed."""
