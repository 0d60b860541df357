"""Read-only data access used by the rankers."""
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, TypeVar

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movie_recommendation_service.errors import DataSourceError
from movie_recommendation_service.models.database import get_session
from movie_recommendation_service.repos import CatalogRepository, InteractionRepository
from movie_recommendation_service.types import CatalogItem, ExplicitRating, SignalKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecommendationDataSource(Protocol):
    """Ratings, signals and catalog rows the engine ranks over."""

    async def list_explicit_ratings(self, user_id: Optional[str] = None) -> List[ExplicitRating]:
        ...

    async def list_implicit_signals(self, user_id: str, kind: SignalKind) -> List[int]:
        ...

    async def get_catalog_item(self, item_id: int) -> Optional[CatalogItem]:
        ...

    async def list_catalog_items(self, exclude_ids: Optional[Iterable[int]] = None) -> List[CatalogItem]:
        ...

    async def list_catalog_items_created_since(self, since: datetime) -> List[CatalogItem]:
        ...


class SqlAlchemyDataSource:
    """
    Data source backed by the catalog database.

    Each read opens its own session and runs in a worker thread so
    concurrent requests don't block the event loop on slow queries.
    """

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self.session_factory = session_factory

    # ---------- Async facade ----------

    async def list_explicit_ratings(self, user_id: Optional[str] = None) -> List[ExplicitRating]:
        return await self._read(lambda db: InteractionRepository(db).list_explicit_ratings(user_id))

    async def list_implicit_signals(self, user_id: str, kind: SignalKind) -> List[int]:
        return await self._read(lambda db: InteractionRepository(db).list_implicit_signals(user_id, kind))

    async def get_catalog_item(self, item_id: int) -> Optional[CatalogItem]:
        return await self._read(lambda db: CatalogRepository(db).get_item(item_id))

    async def list_catalog_items(self, exclude_ids: Optional[Iterable[int]] = None) -> List[CatalogItem]:
        excluded = list(exclude_ids or ())
        return await self._read(lambda db: CatalogRepository(db).list_items(excluded))

    async def list_catalog_items_created_since(self, since: datetime) -> List[CatalogItem]:
        return await self._read(lambda db: CatalogRepository(db).list_items_created_since(since))

    # ---------- Private sync impls ----------

    async def _read(self, query: Callable[[Session], T]) -> T:
        return await to_thread.run_sync(self._read_sync, query)

    def _read_sync(self, query: Callable[[Session], T]) -> T:
        db = self.session_factory()
        try:
            return query(db)
        except SQLAlchemyError as e:
            raise DataSourceError(f"Store read failed: {e}") from e
        finally:
            db.close()
