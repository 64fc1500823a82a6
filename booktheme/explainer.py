"""
Explanation Generator Module
============================

Turns a MatchResult into text a reader can follow:
- A one-line summary driven by the strongest signal
- The ranked "why this fits" reasons
- A compatibility percentage
- A mood meter (percent per dimension) for books and derived song vectors
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .config import DEFAULT_WEIGHTS, DIMENSION_LABELS, MOOD_DIMENSIONS, ScoringWeights
from .features import Book, MoodVector
from .matcher import MatchResult


def mood_meter(vector: MoodVector) -> List[Tuple[str, int]]:
    """(label, percent) rows for each mood dimension, in the fixed order."""
    return [
        (DIMENSION_LABELS[name], int(round(getattr(vector, name) * 100)))
        for name in MOOD_DIMENSIONS
    ]


@dataclass
class MatchExplanation:
    """Human-readable explanation of a theme song match."""
    book_id: str
    song_id: str
    summary: str
    reasons: List[str] = field(default_factory=list)
    compatibility: int = 0
    primary_signal: str = ""

    def to_dict(self) -> Dict:
        return {
            "book_id": self.book_id,
            "song_id": self.song_id,
            "summary": self.summary,
            "reasons": list(self.reasons),
            "compatibility": self.compatibility,
            "primary_signal": self.primary_signal,
        }


class ExplanationGenerator:
    """
    Generates human-readable explanations for matches.

    The primary signal is whichever weighted component moved the score most:
    shared tags, mood-vector agreement, or mismatch penalties.
    """

    def __init__(self, weights: ScoringWeights = DEFAULT_WEIGHTS):
        self.weights = weights

    def explain(self, book: Book, result: MatchResult) -> MatchExplanation:
        """
        Generate an explanation for one match.

        Args:
            book: The matched book
            result: Its MatchResult

        Returns:
            MatchExplanation instance
        """
        component_scores = {
            "tags": result.tag_score * self.weights.tag_similarity,
            "mood": result.vector_score * self.weights.vector_similarity,
            "penalties": abs(result.penalty_score),
        }
        primary_signal = max(component_scores, key=lambda k: component_scores[k])

        return MatchExplanation(
            book_id=book.id,
            song_id=result.song.id,
            summary=self._generate_summary(book, result, primary_signal),
            reasons=[f.description for f in result.top_factors],
            compatibility=result.compatibility,
            primary_signal=primary_signal,
        )

    def _generate_summary(self, book: Book, result: MatchResult, primary_signal: str) -> str:
        """Generate concise summary sentence."""
        song = result.song
        by_artist = f" by {song.artist}" if song.artist else ""
        summaries = {
            "tags": lambda: f"{song.title}{by_artist} shares the vibe of {book.title}.",
            "mood": lambda: f"{song.title}{by_artist} carries the same mood as {book.title}.",
            "penalties": lambda: f"{song.title}{by_artist} is the closest fit for {book.title}, with some mismatches.",
        }

        return summaries.get(primary_signal, lambda: f"{song.title} matches {book.title}.")()


def explain_match(book: Book, result: MatchResult) -> str:
    """
    Convenience function for a plain-text explanation.

    Args:
        book: The matched book
        result: Its MatchResult

    Returns:
        Summary, reasons and compatibility as multi-line text
    """
    explanation = ExplanationGenerator().explain(book, result)
    lines = [explanation.summary]
    lines.extend(f"  - {reason}" for reason in explanation.reasons)
    lines.append(f"Match score: {explanation.compatibility}% compatibility")
    return "\n".join(lines)
