"""
Similarity Metrics
==================

Pure functions comparing books and songs:

1. Tag similarity: Jaccard index of lower-cased vibe tag sets
       S_tag = |A ∩ B| / |A ∪ B|
2. Vector similarity: cosine of the two mood vectors over the 9 fixed
   dimensions
       S_vec = (a · b) / (||a|| ||b||)
3. Per-dimension alignment, 1 - |a_i - b_i|, used for explanations.
"""

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as pairwise_cosine

from .config import MOOD_DIMENSIONS
from .features import MoodVector
from .utils import normalize_tags


@dataclass(frozen=True)
class DimensionAlignment:
    """How closely two vectors agree on a single mood dimension."""
    dimension: str
    value_a: float
    value_b: float
    similarity: float


def jaccard_similarity(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    """
    Case-insensitive Jaccard similarity between two tag collections.

    Returns 0.0 when both collections are empty.
    """
    set_a = set(normalize_tags(tags_a))
    set_b = set(normalize_tags(tags_b))

    union = set_a | set_b
    if not union:
        return 0.0

    return len(set_a & set_b) / len(union)


def overlapping_tags(tags_a: Iterable[str], tags_b: Iterable[str]) -> List[str]:
    """
    Tags shared by both collections, compared case-insensitively.

    Returns:
        Lower-cased shared tags in the order they first appear in ``tags_a``
    """
    set_b = set(normalize_tags(tags_b))
    return [tag for tag in normalize_tags(tags_a) if tag in set_b]


def cosine_similarity(vec_a: MoodVector, vec_b: MoodVector) -> float:
    """
    Cosine similarity between two mood vectors.

    Returns 0.0 if either vector has zero magnitude.
    """
    a = vec_a.to_array()
    b = vec_b.to_array()

    if not np.any(a) or not np.any(b):
        return 0.0

    return float(pairwise_cosine(a.reshape(1, -1), b.reshape(1, -1))[0, 0])


def top_aligned_dimensions(
    vec_a: MoodVector,
    vec_b: MoodVector,
    n: int = 3
) -> List[DimensionAlignment]:
    """
    Get the dimensions where two vectors agree most.

    Args:
        vec_a: First vector (usually the book's)
        vec_b: Second vector (usually the song's derived vector)
        n: Number of dimensions to return

    Returns:
        Alignments sorted by similarity descending; ties keep dimension order
    """
    if n <= 0:
        return []

    a = vec_a.to_array()
    b = vec_b.to_array()
    similarities = 1.0 - np.abs(a - b)

    # Stable sort so equal similarities keep the fixed dimension order
    order = np.argsort(-similarities, kind="stable")[:n]

    return [
        DimensionAlignment(
            dimension=MOOD_DIMENSIONS[i],
            value_a=float(a[i]),
            value_b=float(b[i]),
            similarity=float(similarities[i]),
        )
        for i in order
    ]
