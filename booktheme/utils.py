"""
Utility Functions
=================

Common utilities used across the BookTheme engine.
"""

import logging
import sys
from typing import Iterable, List


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Configure root logging for command-line use.

    The library itself never installs handlers; only entry points call this.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """
    Lower-case tags, dropping duplicates but keeping first-seen order.

    Args:
        tags: Free-text vibe tags

    Returns:
        Normalized tag list
    """
    seen = set()
    normalized = []
    for tag in tags:
        key = tag.lower()
        if key not in seen:
            seen.add(key)
            normalized.append(key)
    return normalized


def clamp_unit(value: float) -> float:
    """Clamp a value into [0, 1]."""
    return min(max(value, 0.0), 1.0)


def compatibility_percent(score: float) -> int:
    """Total score as a rounded percentage, as shown next to a match."""
    return int(round(score * 100))
