"""Unit tests for movie_recommendation_service.services.data_source."""
from datetime import timedelta
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from movie_recommendation_service.errors import DataSourceError
from movie_recommendation_service.models.catalog_item import CatalogItemRecord
from movie_recommendation_service.services.data_source import SqlAlchemyDataSource
from movie_recommendation_service.services.recommendation_service import RecommendationService
from movie_recommendation_service.types import ContentType, ExplicitRating, SignalKind
from tests.helpers import NOW


@pytest.fixture
def sql_data_source(test_session_factory, sample_db_records):
    """SqlAlchemyDataSource over the populated test database."""
    return SqlAlchemyDataSource(session_factory=test_session_factory)


@pytest.mark.anyio
class TestSqlAlchemyDataSource:
    """Tests for SqlAlchemyDataSource reads."""

    async def test_list_explicit_ratings(self, sql_data_source):
        """Test per-user and full rating reads."""
        assert await sql_data_source.list_explicit_ratings("u1") == [
            ExplicitRating("u1", 1, 5),
            ExplicitRating("u1", 2, 2),
        ]
        assert len(await sql_data_source.list_explicit_ratings()) == 3

    async def test_list_implicit_signals(self, sql_data_source):
        """Test watched and favorite reads."""
        assert await sql_data_source.list_implicit_signals("u1", SignalKind.WATCHED) == [3]
        assert await sql_data_source.list_implicit_signals("u1", SignalKind.FAVORITE) == [1]

    async def test_get_catalog_item(self, sql_data_source):
        """Test single item reads."""
        item = await sql_data_source.get_catalog_item(2)

        assert item.title == "Drama One"
        assert item.genre_ids == frozenset({2})
        assert await sql_data_source.get_catalog_item(42) is None

    async def test_list_catalog_items(self, sql_data_source):
        """Test catalog reads with exclusions."""
        assert [i.id for i in await sql_data_source.list_catalog_items()] == [1, 2, 3]
        assert [i.id for i in await sql_data_source.list_catalog_items(exclude_ids=[2])] == [1, 3]

    async def test_list_catalog_items_created_since(self, sql_data_source):
        """Test recency reads."""
        items = await sql_data_source.list_catalog_items_created_since(NOW - timedelta(days=15))

        assert [i.id for i in items] == [3, 2]


@pytest.mark.anyio
class TestSqlAlchemyDataSourceErrors:
    """Tests for store failures."""

    async def test_sqlalchemy_error_is_wrapped(self):
        """Test database errors surface as DataSourceError and the session is closed."""
        # Arrange
        session = Mock()
        session.query.side_effect = SQLAlchemyError("connection lost")
        source = SqlAlchemyDataSource(session_factory=lambda: session)

        # Act / Assert
        with pytest.raises(DataSourceError, match="connection lost"):
            await source.list_catalog_items()
        session.close.assert_called_once()

    async def test_session_closed_after_success(self):
        """Test sessions are always closed."""
        # Arrange
        session = Mock()
        session.query.return_value.order_by.return_value.all.return_value = []
        source = SqlAlchemyDataSource(session_factory=lambda: session)

        # Act
        result = await source.list_catalog_items()

        # Assert
        assert result == []
        session.close.assert_called_once()


@pytest.mark.anyio
class TestMixedClassifications:
    """Tests for catalogs holding every stored content type."""

    @pytest.fixture
    def mixed_source(self, test_session_factory, test_db_session, sample_db_records):
        """Add an anime, a short film and a row with an unknown content type."""
        test_db_session.add_all([
            CatalogItemRecord(id=4, title="Anime One", year=2020, content_type=2, view_count=40,
                              created_at=NOW - timedelta(days=3)),
            CatalogItemRecord(id=5, title="Short One", year=2021, content_type=6, view_count=20,
                              created_at=NOW - timedelta(days=4)),
            CatalogItemRecord(id=6, title="Mystery", year=2022, content_type=9, view_count=10,
                              created_at=NOW - timedelta(days=5)),
        ])
        test_db_session.commit()
        return SqlAlchemyDataSource(session_factory=test_session_factory)

    async def test_catalog_reads_keep_every_item(self, mixed_source):
        """Test known types map to ContentType and the unknown one is unclassified."""
        items = {i.id: i for i in await mixed_source.list_catalog_items()}

        assert sorted(items) == [1, 2, 3, 4, 5, 6]
        assert items[4].content_type is ContentType.ANIME
        assert items[5].content_type is ContentType.SHORT_FILM
        assert items[6].content_type is None

    async def test_recommendations_served(self, mixed_source):
        """Test every public operation still returns results."""
        service = RecommendationService(mixed_source, clock=lambda: NOW)

        assert len(await service.recommend(None, 3)) == 3
        assert len(await service.recommend("u1", 3)) == 3
        assert len(await service.similar_to(1, 2)) == 2
        assert [i.id for i in await service.new_releases(10)] == [3, 4, 5, 6]
