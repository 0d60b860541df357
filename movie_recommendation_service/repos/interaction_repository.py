"""Repository for reading explicit ratings and implicit signals."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from movie_recommendation_service.models import ImplicitSignalRecord, RatingRecord
from movie_recommendation_service.types import ExplicitRating, SignalKind

logger = logging.getLogger(__name__)


class InteractionRepository:
    """
    Read-only access to user ratings and watched/favorite signals.
    """

    def __init__(self, db: Session):
        self.db = db

    # noinspection PyTypeChecker
    def list_explicit_ratings(self, user_id: Optional[str] = None) -> List[ExplicitRating]:
        """
        List explicit ratings.

        Args:
            user_id: If provided, only this user's ratings. Otherwise all.

        Returns:
            List of ExplicitRating
        """
        query = self.db.query(RatingRecord.user_id, RatingRecord.movie_id, RatingRecord.score)

        if user_id is not None:
            query = query.filter(RatingRecord.user_id == user_id)

        rows = query.order_by(RatingRecord.id).all()
        return [
            ExplicitRating(user_id=row[0], item_id=row[1], score=row[2])
            for row in rows
        ]

    # noinspection PyTypeChecker
    def list_implicit_signals(self, user_id: str, kind: SignalKind) -> List[int]:
        """
        List the item IDs a user has a given signal for.

        Repeated signals for the same item are collapsed.

        Args:
            user_id: User ID
            kind: Signal kind (watched or favorite)

        Returns:
            Distinct item IDs in first-seen order
        """
        rows = (
            self.db.query(ImplicitSignalRecord.movie_id)
            .filter(
                ImplicitSignalRecord.user_id == user_id,
                ImplicitSignalRecord.kind == kind.value
            )
            .order_by(ImplicitSignalRecord.id)
            .all()
        )
        return list(dict.fromkeys(row[0] for row in rows))
