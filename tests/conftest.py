"""Shared fixtures for AutoDeck tests."""

import pytest

from autodeck.config import Config
from autodeck.engine.mixer import AutoDJEngine
from autodeck.library import Track


@pytest.fixture
def config():
    """Default configuration."""
    return Config.defaults()


@pytest.fixture
def engine(config):
    """Club-style engine at t=0, not yet started."""
    return AutoDJEngine(config, mix_style="club", start_ms=0.0)


@pytest.fixture
def track_a():
    return Track(id="track-a", title="Opening Groove", artist="Deck A Artist", bpm=126, key="Am")


@pytest.fixture
def track_b():
    return Track(id="track-b", title="Peak Time", artist="Deck B Artist", bpm=128, key="C", energy="Peak")
