"""
Feature Engineering Module
==========================

Data model for books and songs, and the mapping from a song's raw audio
features into the mood space books are authored in.

Mood Dimensions (all nominally 0-1):
    melancholy, intimacy, intensity, hope, tension,
    warmth, nostalgia, eeriness, pace

Audio Features (all normalized 0-1):
    energy, valence, tempo, acousticness, danceability
"""

import math
import numbers
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from .config import AUDIO_FEATURES, MOOD_DIMENSIONS
from .exceptions import MalformedEntityError
from .utils import clamp_unit


def _require_number(owner: str, name: str, value: Any) -> float:
    """Return ``value`` as a float or raise MalformedEntityError."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise MalformedEntityError(
            f"{owner}.{name} must be numeric, got {type(value).__name__}"
        )
    value = float(value)
    if not math.isfinite(value):
        raise MalformedEntityError(f"{owner}.{name} must be finite, got {value}")
    return value


class _UnitFields:
    """Shared behavior for the fixed-field numeric profiles below."""

    _FIELD_ORDER: List[str] = []

    def __post_init__(self):
        owner = type(self).__name__
        for name in self._FIELD_ORDER:
            # Frozen dataclass: normalize numeric types in place
            object.__setattr__(self, name, _require_number(owner, name, getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        """Build from a mapping; every field is required."""
        if not isinstance(data, Mapping):
            raise MalformedEntityError(
                f"{cls.__name__} must be a mapping, got {type(data).__name__}"
            )
        missing = [name for name in cls._FIELD_ORDER if name not in data]
        if missing:
            raise MalformedEntityError(
                f"{cls.__name__} is missing field(s): {', '.join(missing)}"
            )
        return cls(**{name: data[name] for name in cls._FIELD_ORDER})

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self._FIELD_ORDER}

    def to_array(self) -> np.ndarray:
        """Values as a vector in the fixed field order."""
        return np.array([getattr(self, name) for name in self._FIELD_ORDER], dtype=float)

    def out_of_range(self) -> Dict[str, float]:
        """Fields whose value lies outside [0, 1]."""
        return {
            name: value for name, value in self.to_dict().items()
            if value < 0.0 or value > 1.0
        }

    def clamped(self):
        """Copy with every field clamped into [0, 1]."""
        return replace(self, **{name: clamp_unit(v) for name, v in self.to_dict().items()})


@dataclass(frozen=True)
class MoodVector(_UnitFields):
    """The 9-dimension vibe profile shared by books and songs."""
    melancholy: float    # sadness, grief, longing
    intimacy: float      # closeness, personal connection
    intensity: float     # emotional or narrative strength
    hope: float          # optimism, light at the end
    tension: float       # suspense, conflict, anxiety
    warmth: float        # comfort, coziness, safety
    nostalgia: float     # looking back, memory
    eeriness: float      # uncanny, unsettling, supernatural
    pace: float          # speed of narrative/emotional movement

    _FIELD_ORDER = MOOD_DIMENSIONS


@dataclass(frozen=True)
class AudioFeatures(_UnitFields):
    """Raw audio-style features of a song."""
    energy: float         # intensity and activity
    valence: float        # musical positiveness (happy vs sad)
    tempo: float          # normalized BPM (60-200 -> 0-1)
    acousticness: float   # acoustic vs electronic
    danceability: float   # rhythmic suitability for dancing

    _FIELD_ORDER = AUDIO_FEATURES


def _require_id(owner: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise MalformedEntityError(f"{owner}.id must be a non-empty string, got {value!r}")
    return value


def _require_tags(owner: str, tags: Any) -> Tuple[str, ...]:
    # Ordered collections only: shared-vibe factors follow tag order
    if not isinstance(tags, (list, tuple)):
        raise MalformedEntityError(f"{owner}.tags must be a list of strings, got {type(tags).__name__}")
    for tag in tags:
        if not isinstance(tag, str):
            raise MalformedEntityError(f"{owner}.tags must contain strings, got {tag!r}")
    return tuple(tags)


@dataclass(frozen=True)
class Book:
    """A book with authored vibe tags and mood vector."""
    id: str
    title: str
    tags: Tuple[str, ...]
    mood_vector: MoodVector
    author: str = ""
    blurb: str = ""
    genre: Optional[str] = None

    def __post_init__(self):
        _require_id("Book", self.id)
        object.__setattr__(self, "tags", _require_tags("Book", self.tags))
        if not isinstance(self.mood_vector, MoodVector):
            raise MalformedEntityError(
                f"Book {self.id!r} needs a MoodVector, got {type(self.mood_vector).__name__}"
            )


@dataclass(frozen=True)
class Song:
    """A song with vibe tags and raw audio features."""
    id: str
    title: str
    tags: Tuple[str, ...]
    audio: AudioFeatures
    artist: str = ""
    spotify_url: str = ""
    preview_url: Optional[str] = None
    blurb: str = ""

    def __post_init__(self):
        _require_id("Song", self.id)
        object.__setattr__(self, "tags", _require_tags("Song", self.tags))
        if not isinstance(self.audio, AudioFeatures):
            raise MalformedEntityError(
                f"Song {self.id!r} needs AudioFeatures, got {type(self.audio).__name__}"
            )

    @property
    def mood_vector(self) -> MoodVector:
        """Mood vector derived from the song's audio features."""
        return derive_mood_vector(self.audio)


def derive_mood_vector(audio: AudioFeatures) -> MoodVector:
    """
    Derive a mood vector from song audio features.

    MAPPING:
    - melancholy = 1 - valence: low valence reads as sad
    - intimacy = acousticness*0.6 + (1-energy)*0.4: acoustic and quiet
    - intensity = energy
    - hope = valence*0.7 + energy*0.3: positive and energetic
    - tension = energy*0.5 + (1-valence)*0.5: energetic but negative
    - warmth = acousticness*0.5 + valence*0.3 + (1-energy)*0.2
    - nostalgia = acousticness*0.4 + (1-tempo)*0.3 + (1-energy)*0.3
    - eeriness = (1-valence)*0.5 + (1-danceability)*0.3 + (1-warmth)*0.2
    - pace = tempo*0.6 + energy*0.4

    Out-of-range inputs are not clamped.

    Args:
        audio: Song audio features

    Returns:
        Derived MoodVector
    """
    energy = audio.energy
    valence = audio.valence
    tempo = audio.tempo
    acousticness = audio.acousticness
    danceability = audio.danceability

    # eeriness reuses this exact value
    warmth = acousticness * 0.5 + valence * 0.3 + (1 - energy) * 0.2

    return MoodVector(
        melancholy=1 - valence,
        intimacy=acousticness * 0.6 + (1 - energy) * 0.4,
        intensity=energy,
        hope=valence * 0.7 + energy * 0.3,
        tension=energy * 0.5 + (1 - valence) * 0.5,
        warmth=warmth,
        nostalgia=acousticness * 0.4 + (1 - tempo) * 0.3 + (1 - energy) * 0.3,
        eeriness=(1 - valence) * 0.5 + (1 - danceability) * 0.3 + (1 - warmth) * 0.2,
        pace=tempo * 0.6 + energy * 0.4,
    )
