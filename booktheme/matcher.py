"""
Theme Song Match Engine
=======================

Orchestrates scoring of (book, song) pairs:
1. Derive the song's mood vector from its audio features
2. Tag similarity (Jaccard) and vector similarity (cosine)
3. Mismatch penalties
4. Total score and ranked scoring factors

On top of single-pair scoring it finds the best or top-N songs for a book
and assigns songs to a whole shelf of books so that no song is used twice.

The unique assignment is greedy: every pair is scored, pairs are sorted by
score (enumeration order breaks exact ties) and committed whenever both the
book and the song are still free. It is deterministic but not guaranteed to
maximize the summed score.
"""

import json
import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .config import (
    DEFAULT_ENGINE_CONFIG,
    RANGE_CLAMP,
    RANGE_REJECT,
    EngineConfig,
)
from .exceptions import (
    MalformedEntityError,
    NoCandidatesError,
    UnknownEntityError,
    ValueRangeError,
)
from .features import Book, Song, derive_mood_vector
from .penalties import DEFAULT_PENALTY_RULES, PenaltyEvaluator, PenaltyRule
from .scoring import ScoreComposer, ScoringFactor
from .similarity import cosine_similarity, jaccard_similarity
from .utils import compatibility_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """Score and explanation for one (book, song) pair."""
    song: Song
    total_score: float
    tag_score: float
    vector_score: float
    penalty_score: float
    top_factors: Tuple[ScoringFactor, ...] = ()

    @property
    def compatibility(self) -> int:
        return compatibility_percent(self.total_score)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "song_id": self.song.id,
            "song_title": self.song.title,
            "artist": self.song.artist,
            "total_score": round(self.total_score, 4),
            "compatibility": self.compatibility,
            "tag_score": round(self.tag_score, 4),
            "vector_score": round(self.vector_score, 4),
            "penalty_score": round(self.penalty_score, 4),
            "top_factors": [f.to_dict() for f in self.top_factors],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class _ScoredPair(NamedTuple):
    index: int
    book_id: str
    song_id: str
    result: MatchResult


class MatchEngine:
    """
    Scores books against songs and assigns theme songs.

    Holds only immutable configuration, so one engine can be shared freely.

    Usage:
        engine = MatchEngine()
        best = engine.find_best_match(book, songs)
        shelf = engine.assign_unique(books, songs)
    """

    def __init__(
        self,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        penalty_rules: Sequence[PenaltyRule] = DEFAULT_PENALTY_RULES
    ):
        """
        Initialize the match engine.

        Args:
            config: Engine configuration (range policy, penalty floor, limits)
            penalty_rules: Mismatch rules, applied in order
        """
        self.config = config
        self.penalty_evaluator = PenaltyEvaluator(penalty_rules, floor=config.penalty_floor)
        self.composer = ScoreComposer(config)

    # -------------------------------------------------------------------------
    # Single pair
    # -------------------------------------------------------------------------
    def score_pair(self, book: Book, song: Song) -> MatchResult:
        """
        Score one (book, song) pair.

        Args:
            book: The book to match
            song: The candidate song

        Returns:
            MatchResult with component scores and top factors

        Raises:
            MalformedEntityError: if either entity is malformed
            ValueRangeError: under the ``reject`` range policy
        """
        scored_book, audio = self._prepare(book, song)

        song_vector = derive_mood_vector(audio)
        tag_score = jaccard_similarity(scored_book.tags, song.tags)
        vector_score = cosine_similarity(scored_book.mood_vector, song_vector)
        penalties = self.penalty_evaluator.evaluate(scored_book, song_vector, audio)

        total_score = self.composer.combine(tag_score, vector_score, penalties.total)
        top_factors = self.composer.compose(
            scored_book,
            song,
            song_vector,
            tag_score,
            vector_score,
            penalties,
        )

        logger.debug(
            "book=%s song=%s total=%.4f tag=%.4f vector=%.4f penalty=%.4f",
            book.id, song.id, total_score, tag_score, vector_score, penalties.total,
        )

        return MatchResult(
            song=song,
            total_score=total_score,
            tag_score=tag_score,
            vector_score=vector_score,
            penalty_score=penalties.total,
            top_factors=tuple(top_factors),
        )

    def _prepare(self, book: Book, song: Song):
        """Validate the entities and apply the range policy."""
        if not isinstance(book, Book):
            raise MalformedEntityError(f"Expected a Book, got {type(book).__name__}")
        if not isinstance(song, Song):
            raise MalformedEntityError(f"Expected a Song, got {type(song).__name__}")

        audio = song.audio
        policy = self.config.range_policy

        if policy in (RANGE_CLAMP, RANGE_REJECT):
            book_outliers = book.mood_vector.out_of_range()
            song_outliers = audio.out_of_range()

            if policy == RANGE_REJECT:
                if book_outliers:
                    raise ValueRangeError(f"Book {book.id!r} has values outside [0, 1]: {book_outliers}")
                if song_outliers:
                    raise ValueRangeError(f"Song {song.id!r} has values outside [0, 1]: {song_outliers}")
            else:
                if book_outliers:
                    logger.warning("Clamping out-of-range mood values for book %s: %s", book.id, book_outliers)
                    book = replace(book, mood_vector=book.mood_vector.clamped())
                if song_outliers:
                    logger.warning("Clamping out-of-range audio values for song %s: %s", song.id, song_outliers)
                    audio = audio.clamped()

        return book, audio

    # -------------------------------------------------------------------------
    # Ranking
    # -------------------------------------------------------------------------
    def find_best_match(self, book: Book, songs: Iterable[Song]) -> MatchResult:
        """
        Find the best theme song for a book.

        Args:
            book: The book to match
            songs: All available songs

        Returns:
            The highest-scoring MatchResult (first seen wins exact ties)

        Raises:
            NoCandidatesError: if ``songs`` is empty
        """
        best_match: Optional[MatchResult] = None

        for song in songs:
            result = self.score_pair(book, song)
            if best_match is None or result.total_score > best_match.total_score:
                best_match = result

        if best_match is None:
            raise NoCandidatesError("No songs available for matching")

        return best_match

    def find_top_matches(
        self,
        book: Book,
        songs: Iterable[Song],
        n: Optional[int] = None
    ) -> List[MatchResult]:
        """
        Get the top N matches for a book.

        Args:
            book: The book to match
            songs: All available songs
            n: Number of matches (defaults to the configured top_n)

        Returns:
            Up to n results, best first; equal scores keep input order
        """
        if n is None:
            n = self.config.top_n
        if n <= 0:
            return []

        results = [self.score_pair(book, song) for song in songs]
        results.sort(key=lambda r: r.total_score, reverse=True)
        return results[:n]

    # -------------------------------------------------------------------------
    # Unique assignment
    # -------------------------------------------------------------------------
    def assign_unique(
        self,
        books: Iterable[Book],
        songs: Iterable[Song]
    ) -> Dict[str, MatchResult]:
        """
        Match every book to a distinct song using a greedy algorithm.

        ALGORITHM:
        1. Score all book-song pairs (book-major, song-minor)
        2. Sort pairs by score descending, enumeration index as tie-break
        3. Commit each pair whose book and song are both still free
        4. Stop once every book is assigned

        Args:
            books: All books to match
            songs: All available songs

        Returns:
            Map of book id to MatchResult, in commit order
        """
        books = list(books)
        songs = list(songs)

        pairs: List[_ScoredPair] = []
        for book in books:
            for song in songs:
                pairs.append(_ScoredPair(
                    index=len(pairs),
                    book_id=book.id,
                    song_id=song.id,
                    result=self.score_pair(book, song),
                ))

        # Explicit index key keeps float ties deterministic
        pairs.sort(key=lambda p: (-p.result.total_score, p.index))

        n_books = len({book.id for book in books})
        assignments: Dict[str, MatchResult] = {}
        used_song_ids = set()

        for pair in pairs:
            if len(assignments) == n_books:
                break
            if pair.book_id in assignments or pair.song_id in used_song_ids:
                logger.debug(
                    "Skipping book=%s song=%s (%.4f): %s already taken",
                    pair.book_id, pair.song_id, pair.result.total_score,
                    "book" if pair.book_id in assignments else "song",
                )
                continue

            assignments[pair.book_id] = pair.result
            used_song_ids.add(pair.song_id)

        unassigned = n_books - len(assignments)
        logger.info(
            "Assigned %d of %d books across %d songs (%d pairs scored)",
            len(assignments), n_books, len(songs), len(pairs),
        )
        if unassigned:
            logger.info("%d books left without a song: not enough distinct songs", unassigned)

        return assignments

    def lookup_assigned(
        self,
        book: Book,
        songs: Iterable[Song],
        mapping: Mapping[str, str]
    ) -> MatchResult:
        """
        Rescore a pair from a precomputed book id -> song id mapping.

        Args:
            book: The book to look up
            songs: Song catalogue containing the mapped song
            mapping: Persisted output of a previous assignment

        Returns:
            MatchResult for the mapped pair, with full explanation

        Raises:
            UnknownEntityError: if the book is not mapped or the song is missing
        """
        song_id = mapping.get(book.id)
        if song_id is None:
            raise UnknownEntityError(f"No song assigned to book {book.id!r}")

        for song in songs:
            if song.id == song_id:
                return self.score_pair(book, song)

        raise UnknownEntityError(f"Song {song_id!r} assigned to book {book.id!r} not found")


def assignment_to_mapping(assignments: Mapping[str, MatchResult]) -> Dict[str, str]:
    """Reduce an assignment to its persisted book id -> song id form."""
    return {book_id: result.song.id for book_id, result in assignments.items()}
