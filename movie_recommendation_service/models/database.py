"""movie_recommendation_service/models/database.py"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from movie_recommendation_service.config import get_database_url

# Session factory, bound to the engine on first use
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engine: Engine | None = None


def get_engine() -> Engine:
    """Create the engine from DATABASE_URL the first time it is needed."""
    global _engine
    if _engine is None:
        database_url = get_database_url()

        # Validate database URL is provided
        if database_url is None:
            raise ValueError("DATABASE_URL is not configured. Set the DATABASE_URL environment variable.")

        _engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=False  # Set to True for SQL debugging
        )
        SessionLocal.configure(bind=_engine)
    return _engine


def get_session() -> Session:
    """Open a new session on the configured engine."""
    get_engine()
    return SessionLocal()


def get_db():
    """Dependency to get database session"""
    db = get_session()
    try:
        yield db
    finally:
        db.close()
