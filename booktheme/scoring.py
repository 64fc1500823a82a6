"""
Score Composition
=================

Combines the similarity metrics and mismatch penalties of one
(book, song) pair into a final score and an explanation.

Mathematical Formulation:
-------------------------

Final Score = w_tag × S_tag + w_vec × S_vec + P

where:
    S_tag = jaccard(T_book, T_song)
    S_vec = cos(v_book, v_song)
    P     = sum of fired penalty rules (<= 0)
    w_tag = 0.55, w_vec = 0.35

The explanation is a short list of ScoringFactor entries ranked by the
magnitude of their contribution.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, List

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .features import Book, MoodVector, Song
from .similarity import overlapping_tags, top_aligned_dimensions

if TYPE_CHECKING:
    from .penalties import PenaltyResult


class FactorKind(str, Enum):
    """Direction of a scoring factor."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class ScoringFactor:
    """One human-readable reason behind a score."""
    description: str
    contribution: float
    kind: FactorKind = FactorKind.NEUTRAL

    def to_dict(self) -> Dict:
        return {
            "factor": self.description,
            "contribution": round(self.contribution, 4),
            "type": self.kind.value,
        }


class ScoreComposer:
    """
    Turns component scores into a total and a ranked explanation.

    Weights and explanation limits come from the engine configuration.
    """

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.config = config
        self.weights = config.weights

    def combine(self, tag_score: float, vector_score: float, penalty_total: float) -> float:
        """Weighted sum of the tag and vector scores plus the (negative) penalty."""
        return (
            tag_score * self.weights.tag_similarity +
            vector_score * self.weights.vector_similarity +
            penalty_total
        )

    def compose(
        self,
        book: Book,
        song: Song,
        song_vector: MoodVector,
        tag_score: float,
        vector_score: float,
        penalties: "PenaltyResult"
    ) -> List[ScoringFactor]:
        """
        Generate the top scoring factors for a pair.

        Candidates, in order:
        1. Shared tags (first few, in the book's tag order)
        2. A "strong alignment" factor per top-aligned mood dimension above
           the alignment threshold
        3. Every fired penalty

        Args:
            book: The book being matched
            song: The candidate song
            song_vector: Mood vector derived from the song
            tag_score: Jaccard similarity of the tags
            vector_score: Cosine similarity of the mood vectors
            penalties: Result of the penalty evaluation

        Returns:
            At most ``max_factors`` factors, largest absolute contribution first
        """
        factors: List[ScoringFactor] = []

        shared = overlapping_tags(book.tags, song.tags)
        if shared:
            factors.append(ScoringFactor(
                description=f"Shared vibes: {', '.join(shared[:self.config.max_shared_tags])}",
                contribution=tag_score * self.weights.tag_similarity,
                kind=FactorKind.POSITIVE,
            ))

        alignments = top_aligned_dimensions(
            book.mood_vector,
            song_vector,
            self.config.aligned_dimensions,
        )
        for alignment in alignments:
            if alignment.similarity > self.config.alignment_threshold:
                # Fixed share of the weighted vector score, not the dimension's own term
                factors.append(ScoringFactor(
                    description=f"Strong {alignment.dimension} alignment",
                    contribution=(
                        vector_score *
                        self.weights.vector_similarity *
                        self.weights.dimension_attribution
                    ),
                    kind=FactorKind.POSITIVE,
                ))

        factors.extend(penalties.factors)

        # sorted() is stable: equal magnitudes keep the order above
        ranked = sorted(factors, key=lambda f: abs(f.contribution), reverse=True)
        return ranked[:self.config.max_factors]
