from dataclasses import replace

import pytest

from booktheme.config import EngineConfig
from booktheme.features import Book, derive_mood_vector
from booktheme.penalties import PenaltyEvaluator, PenaltyResult
from booktheme.scoring import FactorKind, ScoreComposer, ScoringFactor
from booktheme.similarity import cosine_similarity, jaccard_similarity

from conftest import make_audio, make_song


def compose_for(book, song, composer=None):
    composer = composer or ScoreComposer()
    vector = derive_mood_vector(song.audio)
    tag_score = jaccard_similarity(book.tags, song.tags)
    vector_score = cosine_similarity(book.mood_vector, vector)
    penalties = PenaltyEvaluator().evaluate(book, vector, song.audio)
    return composer.compose(book, song, vector, tag_score, vector_score, penalties), tag_score, vector_score


def tense_book_and_song(book_tags, song_tags):
    # Book mirrors the song's derived vector except for a high tension,
    # which fires the tension/low-energy rule (-0.05).
    song = make_song("quiet-song", tags=song_tags, energy=0.2)
    vector = replace(derive_mood_vector(song.audio), tension=0.75)
    book = Book(id="tense-book", title="Tense Book", tags=tuple(book_tags), mood_vector=vector)
    return book, song


def test_combine_weights():
    composer = ScoreComposer()
    assert composer.combine(1.0, 0.0, 0.0) == pytest.approx(0.55)
    assert composer.combine(0.0, 1.0, 0.0) == pytest.approx(0.35)
    assert composer.combine(0.5, 0.5, -0.1) == pytest.approx(0.275 + 0.175 - 0.1)


def test_factors_for_close_match(test_book, test_songs):
    factors, tag_score, vector_score = compose_for(test_book, test_songs[0])

    assert [f.description for f in factors] == [
        "Shared vibes: melancholic, nostalgic, intimate",
        "Strong melancholy alignment",
        "Strong pace alignment",
    ]
    assert factors[0].contribution == pytest.approx(tag_score * 0.55)
    assert factors[1].contribution == pytest.approx(vector_score * 0.35 * 0.3)
    assert all(f.kind is FactorKind.POSITIVE for f in factors)


def test_shared_tags_limited_to_three_in_book_order():
    book, song = tense_book_and_song(["Quiet", "soft", "Dark", "cold"], ["cold", "dark", "soft", "quiet"])
    factors, _, _ = compose_for(book, song)
    assert factors[0].description == "Shared vibes: quiet, soft, dark"


def test_penalty_dropped_by_truncation():
    book, song = tense_book_and_song(["calm"], ["calm"])
    factors, _, _ = compose_for(book, song)

    assert len(factors) == 3
    assert [f.description for f in factors] == [
        "Shared vibes: calm",
        "Strong melancholy alignment",
        "Strong intimacy alignment",
    ]


def test_penalty_kept_when_room():
    book, song = tense_book_and_song(["calm"], ["loud"])
    factors, _, _ = compose_for(book, song)

    assert [f.description for f in factors] == [
        "Strong melancholy alignment",
        "Strong intimacy alignment",
        "Song too mellow for high-tension book",
    ]
    assert factors[2].kind is FactorKind.NEGATIVE
    assert factors[2].contribution == -0.05


def test_no_factors_without_overlap_alignment_or_penalty():
    book = Book(id="b", title="B", tags=("a",), mood_vector=derive_mood_vector(make_audio()).clamped())
    far_song = make_song("far", tags=("z",), energy=1.0, valence=1.0, tempo=1.0, acousticness=0.0, danceability=1.0)
    composer = ScoreComposer(EngineConfig(alignment_threshold=1.0))
    factors = composer.compose(book, far_song, derive_mood_vector(far_song.audio), 0.0, 0.5, PenaltyResult())
    assert factors == []


def test_sorted_by_absolute_contribution():
    composer = ScoreComposer(EngineConfig(alignment_threshold=1.0))
    book, song = tense_book_and_song(["x"], ["y"])
    penalties = PenaltyResult(total=-0.3, factors=(
        ScoringFactor("small", -0.01, FactorKind.NEGATIVE),
        ScoringFactor("big", -0.2, FactorKind.NEGATIVE),
    ))
    factors = composer.compose(book, song, derive_mood_vector(song.audio), 0.0, 0.0, penalties)
    assert [f.description for f in factors] == ["big", "small"]


def test_factor_to_dict():
    factor = ScoringFactor("Strong hope alignment", 0.123456, FactorKind.POSITIVE)
    assert factor.to_dict() == {
        "factor": "Strong hope alignment",
        "contribution": 0.1235,
        "type": "positive",
    }
