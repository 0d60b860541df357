"""Cosine similarity over sparse key -> weight mappings."""
import logging
from typing import Hashable, List, Mapping, Sequence

import numpy as np
from sklearn.feature_extraction import DictVectorizer  # type: ignore
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine  # type: ignore

logger = logging.getLogger(__name__)


def cosine_similarity(
    vector_a: Mapping[Hashable, float],
    vector_b: Mapping[Hashable, float]
) -> float:
    """
    Cosine similarity between two sparse vectors.

    Keys missing from one side count as zero. Works for feature vectors
    (FeatureKey -> weight) as well as rating vectors (item id -> score).

    Args:
        vector_a: First mapping of key to weight
        vector_b: Second mapping of key to weight

    Returns:
        Similarity in [-1, 1]; 0.0 when either vector has zero norm
    """
    if not vector_a or not vector_b:
        return 0.0

    keys = list(vector_a.keys() | vector_b.keys())
    a = np.fromiter((vector_a.get(k, 0.0) for k in keys), dtype=float, count=len(keys))
    b = np.fromiter((vector_b.get(k, 0.0) for k in keys), dtype=float, count=len(keys))

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def cosine_similarity_many(
    target: Mapping[Hashable, float],
    others: Sequence[Mapping[Hashable, float]]
) -> List[float]:
    """
    Cosine similarity of one vector against many, computed in a single
    sparse matrix product.

    Args:
        target: Vector to compare against
        others: Vectors to compare

    Returns:
        One similarity per entry of ``others``, in the same order
    """
    if not others:
        return []
    if not target:
        return [0.0] * len(others)

    # DictVectorizer needs string or numeric feature names
    def _stringify(vector: Mapping[Hashable, float]) -> dict:
        return {repr(k): float(v) for k, v in vector.items()}

    vectorizer = DictVectorizer(sparse=True)
    matrix = vectorizer.fit_transform([_stringify(target)] + [_stringify(v) for v in others])

    # Zero rows come back as 0.0 from sklearn's normalisation
    similarities = _pairwise_cosine(matrix[0], matrix[1:])[0]
    return [float(s) for s in similarities]
