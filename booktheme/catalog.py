"""
Catalog Loading
===============

Converts static book/song records into entities and reads/writes the
book id -> song id mapping produced by a unique assignment.

Records use the keys of the site's data files (``vibeTags``, ``vibeVector``,
``audio``, ``spotifyUrl`` ...); snake_case equivalents are accepted too.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, TypeVar, Union

from .exceptions import MalformedEntityError, UnknownEntityError
from .features import AudioFeatures, Book, MoodVector, Song

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
T = TypeVar("T", Book, Song)


def _field(record: Mapping[str, Any], owner: str, *keys: str, required: bool = True, default: Any = None) -> Any:
    """First present key among ``keys``."""
    for key in keys:
        if key in record:
            return record[key]
    if required:
        ident = record.get("id", "?")
        raise MalformedEntityError(f"{owner} {ident!r} is missing required field {keys[0]!r}")
    return default


def _require_mapping(record: Any, owner: str) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise MalformedEntityError(f"{owner} record must be an object, got {type(record).__name__}")
    return record


def book_from_dict(record: Mapping[str, Any]) -> Book:
    """Build a Book from a data record."""
    record = _require_mapping(record, "Book")
    return Book(
        id=_field(record, "Book", "id"),
        title=_field(record, "Book", "title", required=False, default=""),
        tags=_field(record, "Book", "vibeTags", "tags"),
        mood_vector=MoodVector.from_dict(_field(record, "Book", "vibeVector", "mood_vector")),
        author=_field(record, "Book", "author", required=False, default=""),
        blurb=_field(record, "Book", "vibeBlurb", "blurb", required=False, default=""),
        genre=_field(record, "Book", "genre", required=False),
    )


def song_from_dict(record: Mapping[str, Any]) -> Song:
    """Build a Song from a data record."""
    record = _require_mapping(record, "Song")
    return Song(
        id=_field(record, "Song", "id"),
        title=_field(record, "Song", "title", required=False, default=""),
        tags=_field(record, "Song", "vibeTags", "tags"),
        audio=AudioFeatures.from_dict(_field(record, "Song", "audio")),
        artist=_field(record, "Song", "artist", required=False, default=""),
        spotify_url=_field(record, "Song", "spotifyUrl", "spotify_url", required=False, default=""),
        preview_url=_field(record, "Song", "previewUrl", "preview_url", required=False),
        blurb=_field(record, "Song", "moodBlurb", "blurb", required=False, default=""),
    )


def _read_json(path: PathLike) -> Any:
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedEntityError(f"{path}: invalid JSON ({e})") from e


def _read_records(path: PathLike, kind: str) -> List[Any]:
    data = _read_json(path)
    if not isinstance(data, list):
        raise MalformedEntityError(f"{path}: expected a list of {kind}, got {type(data).__name__}")
    return data


def load_books(path: PathLike) -> List[Book]:
    """Load books from a JSON list of records."""
    books = [book_from_dict(r) for r in _read_records(path, "books")]
    logger.debug("Loaded %d books from %s", len(books), path)
    return books


def load_songs(path: PathLike) -> List[Song]:
    """Load songs from a JSON list of records."""
    songs = [song_from_dict(r) for r in _read_records(path, "songs")]
    logger.debug("Loaded %d songs from %s", len(songs), path)
    return songs


def load_mapping(path: PathLike) -> Dict[str, str]:
    """Load a persisted book id -> song id mapping."""
    data = _read_json(path)
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise MalformedEntityError(f"{path}: expected an object of book id -> song id")
    return data


def save_mapping(mapping: Mapping[str, str], path: PathLike) -> None:
    """Write a book id -> song id mapping as JSON."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(dict(mapping), f, indent=2)
        f.write("\n")
    logger.debug("Wrote mapping for %d books to %s", len(mapping), path)


def index_by_id(entities: Iterable[T]) -> Dict[str, T]:
    """
    Index books or songs by id.

    Raises:
        MalformedEntityError: on duplicate ids
    """
    index: Dict[str, T] = {}
    for entity in entities:
        if entity.id in index:
            raise MalformedEntityError(f"Duplicate id {entity.id!r}")
        index[entity.id] = entity
    return index


def find_by_id(entities: Sequence[T], entity_id: str) -> T:
    """Get one book or song by id, raising UnknownEntityError if absent."""
    for entity in entities:
        if entity.id == entity_id:
            return entity
    raise UnknownEntityError(f"No entry with id {entity_id!r}")
