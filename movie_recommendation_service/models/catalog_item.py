"""Catalog items (movies and series) and their genres."""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from movie_recommendation_service.models.base import Base

item_genres = Table(
    "movie_genres",
    Base.metadata,
    Column("movie_id", Integer, ForeignKey("movies.id"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id"), primary_key=True),
)


class Genre(Base):
    """Genre lookup table."""
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Genre(id={self.id}, name='{self.name}')>"


class CatalogItemRecord(Base):
    """Catalog row owned by catalog ingestion.

    view_count and average_rating are maintained by other services; the
    recommendation engine only reads them.
    """
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    year = Column(Integer, nullable=True)
    content_type = Column(Integer, nullable=True)  # ContentType value
    director = Column(String(255), nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    genres = relationship(Genre, secondary=item_genres, lazy="selectin")

    def __repr__(self):
        return f"<CatalogItemRecord(id={self.id}, title='{self.title}')>"
