import pytest

from booktheme.features import Book, derive_mood_vector
from booktheme.penalties import DEFAULT_PENALTY_RULES, PenaltyEvaluator, PenaltyRule
from booktheme.scoring import FactorKind

from conftest import make_audio, make_vector


def book_with(**mood):
    return Book(id="b", title="B", tags=("x",), mood_vector=make_vector(0.4, **mood))


def evaluate(book, audio, evaluator=None):
    evaluator = evaluator or PenaltyEvaluator()
    return evaluator.evaluate(book, derive_mood_vector(audio), audio)


def test_no_penalty_for_matching_vibes(test_book, test_songs):
    perfect = test_songs[0]
    result = evaluate(test_book, perfect.audio)
    assert result.total == 0
    assert result.factors == ()
    assert not result.fired


def test_melancholy_vs_upbeat_only():
    result = evaluate(book_with(melancholy=0.85), make_audio(valence=0.8))
    assert result.total == pytest.approx(-0.10)
    assert [f.description for f in result.factors] == ["Song too upbeat for melancholic book"]
    assert result.factors[0].kind is FactorKind.NEGATIVE
    assert result.factors[0].contribution == -0.10


@pytest.mark.parametrize("mood, audio, label, penalty", [
    ({"tension": 0.75}, {"energy": 0.2}, "Song too mellow for high-tension book", -0.05),
    ({"eeriness": 0.8}, {"acousticness": 1.0, "valence": 0.6, "energy": 0.4}, "Song too warm for eerie book", -0.08),
    ({"hope": 0.9}, {"valence": 0.1}, "Song too sad for hopeful book", -0.07),
    ({"intensity": 0.85}, {"energy": 0.2}, "Song too mellow for intense book", -0.05),
])
def test_each_rule(mood, audio, label, penalty):
    result = evaluate(book_with(**mood), make_audio(**audio))
    assert [f.description for f in result.factors] == [label]
    assert result.total == pytest.approx(penalty)


def test_thresholds_are_strict():
    # melancholy exactly 0.7 and valence exactly 0.7 do not fire
    assert evaluate(book_with(melancholy=0.7), make_audio(valence=0.8)).total == 0
    assert evaluate(book_with(melancholy=0.8), make_audio(valence=0.7)).total == 0
    assert evaluate(book_with(tension=0.8), make_audio(energy=0.3)).total == 0


def test_multiple_rules_sum_beyond_nominal_ceiling():
    book = book_with(melancholy=0.9, eeriness=0.9)
    # warmth = 0.5 + 0.24 + 0.2 = 0.94
    audio = make_audio(energy=0.0, valence=0.8, acousticness=1.0)
    result = evaluate(book, audio)

    assert result.total == pytest.approx(-0.18)
    assert [f.description for f in result.factors] == [
        "Song too upbeat for melancholic book",
        "Song too warm for eerie book",
    ]


def test_tension_and_intensity_fire_together():
    result = evaluate(book_with(tension=0.9, intensity=0.9), make_audio(energy=0.1))
    assert result.total == pytest.approx(-0.10)
    assert len(result.factors) == 2


def test_floor_caps_total_but_keeps_factors():
    evaluator = PenaltyEvaluator(floor=-0.15)
    book = book_with(melancholy=0.9, eeriness=0.9)
    result = evaluate(book, make_audio(energy=0.0, valence=0.8, acousticness=1.0), evaluator)

    assert result.total == -0.15
    assert len(result.factors) == 2


def test_rule_subset():
    evaluator = PenaltyEvaluator(rules=DEFAULT_PENALTY_RULES[:1])
    result = evaluate(book_with(tension=0.9), make_audio(energy=0.1), evaluator)
    assert result.total == 0


def test_custom_rule():
    rule = PenaltyRule(
        name="slow_for_fast_book",
        guard=lambda book, vec, audio: book.mood_vector.pace > 0.8 and vec.pace < 0.3,
        penalty=-0.02,
        label="Song too slow for fast-paced book",
    )
    evaluator = PenaltyEvaluator(rules=[rule])
    result = evaluate(book_with(pace=0.9), make_audio(tempo=0.1, energy=0.1), evaluator)
    assert result.total == pytest.approx(-0.02)
    assert evaluator.rules == (rule,)


def test_default_rules_are_immutable():
    assert isinstance(DEFAULT_PENALTY_RULES, tuple)
    with pytest.raises(AttributeError):
        DEFAULT_PENALTY_RULES[0].penalty = 0.0
