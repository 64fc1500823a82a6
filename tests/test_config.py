import pytest

from booktheme.config import (
    DEFAULT_ENGINE_CONFIG,
    DEFAULT_WEIGHTS,
    MOOD_DIMENSIONS,
    EngineConfig,
)


def test_defaults():
    assert DEFAULT_ENGINE_CONFIG.range_policy == "passthrough"
    assert DEFAULT_ENGINE_CONFIG.penalty_floor is None
    assert DEFAULT_WEIGHTS.tag_similarity == 0.55
    assert DEFAULT_WEIGHTS.vector_similarity == 0.35
    assert len(MOOD_DIMENSIONS) == 9


def test_from_env(monkeypatch):
    monkeypatch.setenv("BOOKTHEME_RANGE_POLICY", "Clamp")
    monkeypatch.setenv("BOOKTHEME_PENALTY_FLOOR", "-0.15")
    monkeypatch.setenv("BOOKTHEME_TOP_N", "7")

    config = EngineConfig.from_env()
    assert config.range_policy == "clamp"
    assert config.penalty_floor == -0.15
    assert config.top_n == 7


def test_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("BOOKTHEME_RANGE_POLICY", "clamp")
    config = EngineConfig.from_env(range_policy="reject", penalty_floor=None)
    assert config.range_policy == "reject"
    assert config.penalty_floor is None


def test_from_env_without_variables(monkeypatch):
    for name in ("BOOKTHEME_RANGE_POLICY", "BOOKTHEME_PENALTY_FLOOR", "BOOKTHEME_TOP_N"):
        monkeypatch.delenv(name, raising=False)
    assert EngineConfig.from_env() == EngineConfig()


@pytest.mark.parametrize("kwargs", [
    {"range_policy": "ignore"},
    {"penalty_floor": 0.1},
    {"top_n": -1},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


def test_invalid_env(monkeypatch):
    monkeypatch.setenv("BOOKTHEME_TOP_N", "many")
    with pytest.raises(ValueError):
        EngineConfig.from_env()
