"""Feature vectors for catalog items and preference profiles for users."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterable, Mapping, Set, Union

from movie_recommendation_service.types import CatalogItem, ExplicitRating

logger = logging.getLogger(__name__)

YEAR_SCALE = 2100.0
YEAR_RANGE_SCALE = 100.0
LIKED_RATING_THRESHOLD = 4
DEFAULT_UNRATED_WEIGHT = 0.6


@dataclass(frozen=True)
class Genre:
    id: int
    family: ClassVar[str] = "genre"


@dataclass(frozen=True)
class Director:
    name: str
    family: ClassVar[str] = "director"


@dataclass(frozen=True)
class YearAvg:
    family: ClassVar[str] = "year"


@dataclass(frozen=True)
class YearRange:
    family: ClassVar[str] = "year"


@dataclass(frozen=True)
class ContentTypeKey:
    id: int
    family: ClassVar[str] = "content_type"


FeatureKey = Union[Genre, Director, YearAvg, YearRange, ContentTypeKey]
FeatureVector = Dict[FeatureKey, float]
PreferenceProfile = Dict[FeatureKey, float]

# Families whose accumulated weights are scaled by their own maximum
NORMALIZED_FAMILIES = ("genre", "director", "content_type")


def _director_key(director: str | None) -> Director | None:
    if director is None or not director.strip():
        return None
    return Director(director.strip().lower())


def build_item_features(item: CatalogItem) -> FeatureVector:
    """
    Build the feature vector of a single catalog item.

    Missing attributes simply contribute no key, so an item with no genres,
    director, year or classification yields an empty vector.

    Args:
        item: Catalog item

    Returns:
        Mapping of feature key to weight
    """
    features: FeatureVector = {}

    for genre_id in item.genre_ids:
        features[Genre(genre_id)] = 1.0

    director = _director_key(item.director)
    if director is not None:
        features[director] = 1.0

    if item.year is not None:
        features[YearAvg()] = item.year / YEAR_SCALE

    if item.content_type is not None:
        features[ContentTypeKey(int(item.content_type))] = 1.0

    return features


def liked_item_ids(
    ratings: Iterable[ExplicitRating],
    implicit_item_ids: Iterable[int]
) -> Set[int]:
    """Items rated 4 or higher, plus everything watched or favorited."""
    liked = {r.item_id for r in ratings if r.score >= LIKED_RATING_THRESHOLD}
    liked.update(implicit_item_ids)
    return liked


def build_user_profile(
    liked_items: Iterable[CatalogItem],
    ratings_by_item_id: Mapping[int, int],
    unrated_weight: float = DEFAULT_UNRATED_WEIGHT
) -> PreferenceProfile:
    """
    Aggregate a user's liked items into a preference profile.

    Each liked item adds ``rating / 5`` (or ``unrated_weight`` when the user
    never rated it) to every genre, director and content-type key it carries.
    Those families are then scaled independently so their largest weight is
    1.0. Years are summarised as the scaled mean and range.

    Args:
        liked_items: Items the user liked
        ratings_by_item_id: The user's explicit scores keyed by item id
        unrated_weight: Weight for liked items without an explicit score

    Returns:
        Preference profile; empty when there are no liked items
    """
    accumulated: Dict[FeatureKey, float] = defaultdict(float)
    years = []

    for item in liked_items:
        rating = ratings_by_item_id.get(item.id)
        weight = rating / 5.0 if rating is not None else unrated_weight

        for genre_id in item.genre_ids:
            accumulated[Genre(genre_id)] += weight

        director = _director_key(item.director)
        if director is not None:
            accumulated[director] += weight

        if item.content_type is not None:
            accumulated[ContentTypeKey(int(item.content_type))] += weight

        if item.year is not None:
            years.append(item.year)

    profile: PreferenceProfile = {}
    for family in NORMALIZED_FAMILIES:
        weights = {k: w for k, w in accumulated.items() if k.family == family}
        max_weight = max(weights.values(), default=0.0)
        if max_weight <= 0:
            continue
        for key, weight in weights.items():
            profile[key] = weight / max_weight

    if years:
        profile[YearAvg()] = (sum(years) / len(years)) / YEAR_SCALE
        profile[YearRange()] = (max(years) - min(years)) / YEAR_RANGE_SCALE

    return profile
