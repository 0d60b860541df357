"""Explicit ratings and implicit signals recorded by the user-facing flows."""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint

from movie_recommendation_service.models.base import Base


class RatingRecord(Base):
    """A user's 1-5 score for a catalog item, at most one per (user, item)."""
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False)
    score = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "movie_id", name="uq_rating_user_movie"),
        Index("idx_rating_user", "user_id"),
    )

    def __repr__(self):
        return f"<RatingRecord(user_id='{self.user_id}', movie_id={self.movie_id}, score={self.score})>"


class ImplicitSignalRecord(Base):
    """Watched/favorite inventory entry. Repeated rows for the same kind are allowed."""
    __tablename__ = "user_inventory_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False)
    kind = Column(String(20), nullable=False)  # SignalKind value
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_signal_user_kind", "user_id", "kind"),
    )

    def __repr__(self):
        return f"<ImplicitSignalRecord(user_id='{self.user_id}', movie_id={self.movie_id}, kind='{self.kind}')>"
