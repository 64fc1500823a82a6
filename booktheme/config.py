"""
Configuration and constants for the BookTheme matching engine.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# =============================================================================
# MOOD SPACE
# =============================================================================
# Fixed order shared by authored book vectors and derived song vectors
MOOD_DIMENSIONS = [
    "melancholy",
    "intimacy",
    "intensity",
    "hope",
    "tension",
    "warmth",
    "nostalgia",
    "eeriness",
    "pace",
]

# Human-friendly labels for each dimension
DIMENSION_LABELS = {name: name.capitalize() for name in MOOD_DIMENSIONS}

# =============================================================================
# AUDIO FEATURE CONFIGURATION
# =============================================================================
# All normalized to [0, 1]; tempo is BPM mapped from 60-200
AUDIO_FEATURES = [
    "energy",
    "valence",
    "tempo",
    "acousticness",
    "danceability",
]

# =============================================================================
# SCORING WEIGHTS
# =============================================================================
@dataclass(frozen=True)
class ScoringWeights:
    """Weights for combining the score components."""
    # Jaccard similarity of vibe tags
    tag_similarity: float = 0.55

    # Cosine similarity of mood vectors
    vector_similarity: float = 0.35

    # Share of the weighted vector score attributed to one aligned dimension
    dimension_attribution: float = 0.3

    def to_dict(self) -> Dict[str, float]:
        return {
            "tag_similarity": self.tag_similarity,
            "vector_similarity": self.vector_similarity,
            "dimension_attribution": self.dimension_attribution,
        }

DEFAULT_WEIGHTS = ScoringWeights()

# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================
RANGE_PASSTHROUGH = "passthrough"
RANGE_CLAMP = "clamp"
RANGE_REJECT = "reject"
RANGE_POLICIES = [RANGE_PASSTHROUGH, RANGE_CLAMP, RANGE_REJECT]

# Documented penalty ceiling; only enforced when set as penalty_floor
NOMINAL_PENALTY_FLOOR = -0.15


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the match engine."""
    # What to do with mood/audio values outside [0, 1]
    range_policy: str = RANGE_PASSTHROUGH

    # Lower bound for the summed penalty (None = uncapped)
    penalty_floor: Optional[float] = None

    # Default length of top-N listings
    top_n: int = 5

    # Dimension similarity needed for a "strong alignment" factor
    alignment_threshold: float = 0.8

    # How many best-aligned dimensions are considered for factors
    aligned_dimensions: int = 2

    # Explanation limits
    max_factors: int = 3
    max_shared_tags: int = 3

    weights: ScoringWeights = field(default_factory=ScoringWeights)

    def __post_init__(self):
        if self.range_policy not in RANGE_POLICIES:
            raise ValueError(
                f"range_policy must be one of {RANGE_POLICIES}, got {self.range_policy!r}"
            )
        if self.penalty_floor is not None and self.penalty_floor > 0:
            raise ValueError(f"penalty_floor must be <= 0, got {self.penalty_floor}")
        if self.top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {self.top_n}")

    @classmethod
    def from_env(cls, **overrides) -> "EngineConfig":
        """
        Build a config from environment variables.

        Reads BOOKTHEME_RANGE_POLICY, BOOKTHEME_PENALTY_FLOOR and BOOKTHEME_TOP_N
        at call time (not import time). Keyword overrides win over the environment.
        """
        values = {}

        range_policy = os.environ.get("BOOKTHEME_RANGE_POLICY")
        if range_policy:
            values["range_policy"] = range_policy.strip().lower()

        penalty_floor = os.environ.get("BOOKTHEME_PENALTY_FLOOR")
        if penalty_floor:
            values["penalty_floor"] = float(penalty_floor)

        top_n = os.environ.get("BOOKTHEME_TOP_N")
        if top_n:
            values["top_n"] = int(top_n)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

DEFAULT_ENGINE_CONFIG = EngineConfig()

# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================
OUTPUT_FORMATS: List[str] = ["json", "simple"]
