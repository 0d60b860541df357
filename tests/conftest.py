"""Shared test fixtures and configuration for pytest."""
import pytest
from datetime import timedelta
from typing import List
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from movie_recommendation_service.models import (
    Base,
    CatalogItemRecord,
    Genre,
    ImplicitSignalRecord,
    RatingRecord,
)
from movie_recommendation_service.types import CatalogItem, ContentType, ExplicitRating, SignalKind
from tests.helpers import NOW, InMemoryDataSource, make_item

# ===== Async Fixtures =====

@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"

# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()

@pytest.fixture(scope="function")
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(bind=test_db_engine)

@pytest.fixture(scope="function")
def test_db_session(test_session_factory):
    """Create a database session for testing."""
    session = test_session_factory()
    yield session
    session.close()

# ===== Sample Data Fixtures =====

@pytest.fixture
def sample_catalog() -> List[CatalogItem]:
    """Small catalog: genre 1 = Action, 2 = Drama, 3 = Comedy."""
    return [
        make_item(1, {1}, view_count=100, average_rating=4.5, year=2010, director="Christopher Nolan",
                  title="Action One", created_at=NOW - timedelta(days=40)),
        make_item(2, {1}, view_count=50, average_rating=4.0, year=2012, director="christopher nolan",
                  title="Action Two", created_at=NOW - timedelta(days=20)),
        make_item(3, {2}, view_count=80, average_rating=3.5, year=2003, director="Sofia Coppola",
                  title="Drama One", created_at=NOW - timedelta(days=10)),
        make_item(4, {1, 3}, view_count=10, year=2015, title="Action Three",
                  created_at=NOW - timedelta(days=5)),
        make_item(5, {2}, view_count=10, average_rating=4.2, year=2001, title="Drama Two",
                  created_at=NOW - timedelta(days=2)),
        make_item(6, {3}, view_count=500, average_rating=4.8, year=2019, content_type=ContentType.TV_SHOW,
                  title="Comedy Series", created_at=NOW - timedelta(days=60)),
    ]


@pytest.fixture
def sample_ratings() -> List[ExplicitRating]:
    """User u1 loves action and dislikes drama; u2 and u3 rate alongside."""
    return [
        ExplicitRating("u1", 1, 5),
        ExplicitRating("u1", 2, 5),
        ExplicitRating("u1", 3, 1),
        ExplicitRating("u2", 1, 5),
        ExplicitRating("u2", 2, 4),
        ExplicitRating("u2", 4, 5),
        ExplicitRating("u2", 3, 2),
        ExplicitRating("u3", 3, 5),
        ExplicitRating("u3", 5, 5),
    ]

@pytest.fixture
def data_source(sample_catalog, sample_ratings) -> InMemoryDataSource:
    """In-memory data source over the sample catalog and ratings."""
    return InMemoryDataSource(sample_catalog, sample_ratings)

# ===== Database Record Fixtures =====

@pytest.fixture
def sample_db_records(test_db_session):
    """Populate the test database with genres, movies, ratings and signals."""
    action = Genre(id=1, name="Action")
    drama = Genre(id=2, name="Drama")
    comedy = Genre(id=3, name="Comedy")
    test_db_session.add_all([action, drama, comedy])

    movies = [
        CatalogItemRecord(id=1, title="Action One", year=2010, content_type=0, director="Christopher Nolan",
                          view_count=100, average_rating=4.5, created_at=NOW - timedelta(days=40),
                          genres=[action]),
        CatalogItemRecord(id=2, title="Drama One", year=2003, content_type=0, director=None,
                          view_count=80, average_rating=3.5, created_at=NOW - timedelta(days=10),
                          genres=[drama]),
        CatalogItemRecord(id=3, title="Comedy Series", year=None, content_type=1, director=None,
                          view_count=500, average_rating=None, created_at=NOW - timedelta(days=2),
                          genres=[comedy, action]),
    ]
    test_db_session.add_all(movies)

    test_db_session.add_all([
        RatingRecord(user_id="u1", movie_id=1, score=5),
        RatingRecord(user_id="u1", movie_id=2, score=2),
        RatingRecord(user_id="u2", movie_id=1, score=4),
        ImplicitSignalRecord(user_id="u1", movie_id=3, kind=SignalKind.WATCHED.value),
        ImplicitSignalRecord(user_id="u1", movie_id=3, kind=SignalKind.WATCHED.value),
        ImplicitSignalRecord(user_id="u1", movie_id=1, kind=SignalKind.FAVORITE.value),
    ])
    test_db_session.commit()
    return movies

# ===== Configuration Fixtures =====

@pytest.fixture
def no_local_settings(tmp_path):
    """Point config at a project root without local.settings.json."""
    from unittest.mock import patch
    with patch('movie_recommendation_service.config.Path') as mock_path:
        mock_path.return_value.resolve.return_value.parent.parent = tmp_path / 'nonexistent'
        yield
