"""Domain types shared by the scorers, rankers and data sources."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Optional


class ContentType(IntEnum):
    """Content classification of a catalog item."""

    MOVIE = 0
    TV_SHOW = 1
    ANIME = 2
    TRAILER = 3
    BEHIND_THE_SCENES = 4
    DOCUMENTARY = 5
    SHORT_FILM = 6


class SignalKind(str, Enum):
    """Kinds of implicit preference signals."""

    WATCHED = "watched"
    FAVORITE = "favorite"


@dataclass(frozen=True)
class CatalogItem:
    """A movie or series as seen by the engine (read-only)."""

    id: int
    title: str = ""
    year: Optional[int] = None
    content_type: Optional[ContentType] = None
    genre_ids: frozenset[int] = field(default_factory=frozenset)
    director: Optional[str] = None
    view_count: int = 0
    average_rating: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "content_type": self.content_type.name.lower() if self.content_type is not None else None,
            "genre_ids": sorted(self.genre_ids),
            "director": self.director,
            "view_count": self.view_count,
            "average_rating": self.average_rating,
        }


@dataclass(frozen=True)
class ExplicitRating:
    """A user-assigned 1-5 score for a catalog item."""

    user_id: str
    item_id: int
    score: int


@dataclass(frozen=True)
class RankedItem:
    """A catalog item with the score it was ranked by."""

    item: CatalogItem
    score: float
