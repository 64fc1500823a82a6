import json

import pytest

from booktheme.features import AudioFeatures, Book, MoodVector, Song


def make_vector(value=0.5, **overrides):
    values = {
        "melancholy": value, "intimacy": value, "intensity": value,
        "hope": value, "tension": value, "warmth": value,
        "nostalgia": value, "eeriness": value, "pace": value,
    }
    values.update(overrides)
    return MoodVector(**values)


def make_audio(energy=0.5, valence=0.5, tempo=0.5, acousticness=0.5, danceability=0.5):
    return AudioFeatures(
        energy=energy,
        valence=valence,
        tempo=tempo,
        acousticness=acousticness,
        danceability=danceability,
    )


def make_song(song_id, tags=("calm",), **audio):
    return Song(id=song_id, title=song_id.replace("-", " ").title(), tags=tuple(tags), audio=make_audio(**audio))


BOOK_RECORD = {
    "id": "test-book",
    "title": "Test Book",
    "author": "Test Author",
    "coverImageUrl": "/test.jpg",
    "vibeTags": ["melancholic", "nostalgic", "intimate", "tender"],
    "vibeVector": {
        "melancholy": 0.8,
        "intimacy": 0.7,
        "intensity": 0.4,
        "hope": 0.3,
        "tension": 0.4,
        "warmth": 0.5,
        "nostalgia": 0.9,
        "eeriness": 0.2,
        "pace": 0.3,
    },
    "vibeBlurb": "A melancholic and nostalgic test book.",
}

SONG_RECORDS = [
    {
        "id": "perfect-match",
        "title": "Perfect Match Song",
        "artist": "Test Artist 1",
        "spotifyUrl": "https://open.spotify.com/track/test1",
        "previewUrl": None,
        "vibeTags": ["melancholic", "nostalgic", "intimate", "folk"],
        "audio": {
            "energy": 0.25,
            "valence": 0.2,
            "tempo": 0.3,
            "acousticness": 0.9,
            "danceability": 0.25,
        },
        "moodBlurb": "A perfect matching song.",
    },
    {
        "id": "poor-match",
        "title": "Poor Match Song",
        "artist": "Test Artist 2",
        "spotifyUrl": "https://open.spotify.com/track/test2",
        "previewUrl": None,
        "vibeTags": ["upbeat", "energetic", "dance", "party"],
        "audio": {
            "energy": 0.9,
            "valence": 0.85,
            "tempo": 0.85,
            "acousticness": 0.1,
            "danceability": 0.9,
        },
        "moodBlurb": "An upbeat party song.",
    },
    {
        "id": "moderate-match",
        "title": "Moderate Match Song",
        "artist": "Test Artist 3",
        "spotifyUrl": "https://open.spotify.com/track/test3",
        "previewUrl": None,
        "vibeTags": ["atmospheric", "melancholic", "dreamy"],
        "audio": {
            "energy": 0.4,
            "valence": 0.35,
            "tempo": 0.4,
            "acousticness": 0.5,
            "danceability": 0.4,
        },
        "moodBlurb": "A moderately matching atmospheric song.",
    },
]


@pytest.fixture
def test_book():
    return Book(
        id="test-book",
        title="Test Book",
        tags=("melancholic", "nostalgic", "intimate", "tender"),
        mood_vector=MoodVector.from_dict(BOOK_RECORD["vibeVector"]),
        author="Test Author",
    )


@pytest.fixture
def test_songs():
    return [
        Song(
            id=r["id"],
            title=r["title"],
            tags=tuple(r["vibeTags"]),
            audio=AudioFeatures.from_dict(r["audio"]),
            artist=r["artist"],
        )
        for r in SONG_RECORDS
    ]


@pytest.fixture
def data_files(tmp_path):
    books_path = tmp_path / "books.json"
    songs_path = tmp_path / "songs.json"
    books_path.write_text(json.dumps([BOOK_RECORD]), encoding="utf-8")
    songs_path.write_text(json.dumps(SONG_RECORDS), encoding="utf-8")
    return books_path, songs_path
