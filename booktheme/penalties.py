"""
Vibe Mismatch Penalties
=======================

Rule table that lowers the score of songs whose feel contradicts the
book's mood profile, even when tags and vectors look similar.

PENALTY RULES:
- Melancholic book + happy song: -0.10
- Tense book + low-energy song: -0.05
- Eerie book + warm song: -0.08
- Hopeful book + very sad song: -0.07
- Intense book + mellow song: -0.05

Every rule whose guard holds contributes; rules are not exclusive, so the
total can go below the nominal -0.15 unless a floor is configured.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .features import AudioFeatures, Book, MoodVector
from .scoring import FactorKind, ScoringFactor

logger = logging.getLogger(__name__)

# (book, derived song vector, raw audio) -> does the rule fire?
RuleGuard = Callable[[Book, MoodVector, AudioFeatures], bool]


@dataclass(frozen=True)
class PenaltyRule:
    """A single mismatch rule: guard, fixed penalty and explanation label."""
    name: str
    guard: RuleGuard
    penalty: float
    label: str

    def applies(self, book: Book, song_vector: MoodVector, audio: AudioFeatures) -> bool:
        return bool(self.guard(book, song_vector, audio))

    def to_factor(self) -> ScoringFactor:
        return ScoringFactor(
            description=self.label,
            contribution=self.penalty,
            kind=FactorKind.NEGATIVE,
        )


@dataclass(frozen=True)
class PenaltyResult:
    """Summed penalty and the factors of the rules that fired."""
    total: float = 0.0
    factors: Tuple[ScoringFactor, ...] = field(default_factory=tuple)

    @property
    def fired(self) -> bool:
        return bool(self.factors)


DEFAULT_PENALTY_RULES: Tuple[PenaltyRule, ...] = (
    PenaltyRule(
        name="melancholy_vs_upbeat",
        guard=lambda book, vec, audio: book.mood_vector.melancholy > 0.7 and audio.valence > 0.7,
        penalty=-0.10,
        label="Song too upbeat for melancholic book",
    ),
    PenaltyRule(
        name="tension_vs_low_energy",
        guard=lambda book, vec, audio: book.mood_vector.tension > 0.7 and audio.energy < 0.3,
        penalty=-0.05,
        label="Song too mellow for high-tension book",
    ),
    PenaltyRule(
        name="eeriness_vs_warmth",
        guard=lambda book, vec, audio: book.mood_vector.eeriness > 0.7 and vec.warmth > 0.7,
        penalty=-0.08,
        label="Song too warm for eerie book",
    ),
    PenaltyRule(
        name="hope_vs_sad",
        guard=lambda book, vec, audio: book.mood_vector.hope > 0.7 and audio.valence < 0.2,
        penalty=-0.07,
        label="Song too sad for hopeful book",
    ),
    PenaltyRule(
        name="intensity_vs_mellow",
        guard=lambda book, vec, audio: book.mood_vector.intensity > 0.8 and audio.energy < 0.25,
        penalty=-0.05,
        label="Song too mellow for intense book",
    ),
)


class PenaltyEvaluator:
    """
    Applies an ordered, immutable rule table to a (book, song) pair.

    Usage:
        evaluator = PenaltyEvaluator()
        result = evaluator.evaluate(book, derive_mood_vector(song.audio), song.audio)
    """

    def __init__(
        self,
        rules: Sequence[PenaltyRule] = DEFAULT_PENALTY_RULES,
        floor: Optional[float] = None
    ):
        """
        Args:
            rules: Rules to apply, in reporting order
            floor: Lower bound for the summed penalty (None = uncapped)
        """
        self.rules: Tuple[PenaltyRule, ...] = tuple(rules)
        self.floor = floor

    def evaluate(
        self,
        book: Book,
        song_vector: MoodVector,
        audio: AudioFeatures
    ) -> PenaltyResult:
        """
        Evaluate every rule and sum the penalties of those that fire.

        Args:
            book: Book whose mood vector sets the expectations
            song_vector: Mood vector derived from the song
            audio: The song's raw audio features

        Returns:
            PenaltyResult with the total and one factor per fired rule
        """
        total = 0.0
        factors: List[ScoringFactor] = []

        for rule in self.rules:
            if rule.applies(book, song_vector, audio):
                total += rule.penalty
                factors.append(rule.to_factor())

        if self.floor is not None and total < self.floor:
            logger.debug("Penalty %.3f for book %s capped at %.3f", total, book.id, self.floor)
            total = self.floor

        return PenaltyResult(total=total, factors=tuple(factors))
