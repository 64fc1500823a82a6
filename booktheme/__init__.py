"""
BookTheme - Theme Song Matching Engine
======================================

Matches books to theme songs by "vibe": the emotional and aesthetic feel
of both, compared through shared vibe tags and a 9-dimension mood vector.

Modules:
    - config: Configuration and constants
    - exceptions: Error taxonomy
    - features: Mood vectors, audio features and entities
    - similarity: Tag and mood-vector similarity metrics
    - penalties: Vibe mismatch penalty rules
    - scoring: Score combination and scoring factors
    - matcher: Pair scoring, ranking and unique assignment
    - explainer: Explanation generation
    - catalog: Loading books, songs and assignment mappings
    - cli: Command-line interface
"""

from .features import AudioFeatures, Book, MoodVector, Song, derive_mood_vector
from .matcher import MatchEngine, MatchResult
from .exceptions import (
    BookThemeError,
    MalformedEntityError,
    NoCandidatesError,
    UnknownEntityError,
    ValueRangeError,
)

__version__ = "1.0.0"
__author__ = "BookTheme Team"

__all__ = [
    "AudioFeatures",
    "Book",
    "MoodVector",
    "Song",
    "derive_mood_vector",
    "MatchEngine",
    "MatchResult",
    "BookThemeError",
    "MalformedEntityError",
    "NoCandidatesError",
    "UnknownEntityError",
    "ValueRangeError",
]
