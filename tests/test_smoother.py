"""
Unit tests for the parameter smoother.

Tests single steps, convergence, and per-control speeds.
"""

import pytest

from autodeck.deck import Crossfader, Deck, Knob
from autodeck.mixing.smoother import (
    CROSSFADER_SPEED,
    EQ_SPEED,
    FADER_SPEED,
    GAIN_SPEED,
    is_settled,
    smooth,
    smooth_crossfader,
    smooth_deck,
)


class TestSmoothStep:
    """Test a single smoothing step."""

    def test_moves_fraction_of_distance(self):
        """Value moves speed * distance toward target."""
        knob = Knob(value=0.0, target=100.0)
        smooth(knob, 0.1)
        assert knob.value == pytest.approx(10.0)

    def test_moves_downward(self):
        """Smoothing works toward lower targets too."""
        knob = Knob(value=80.0, target=20.0)
        smooth(knob, 0.5)
        assert knob.value == pytest.approx(50.0)

    def test_target_never_mutated(self):
        """Target stays put while value moves."""
        knob = Knob(value=0.0, target=42.0)
        for _ in range(50):
            smooth(knob, 0.2)
        assert knob.target == 42.0

    def test_settled_value_unchanged(self):
        """Within 0.1 of target the value is left alone."""
        knob = Knob(value=49.95, target=50.0)
        smooth(knob, 0.5)
        assert knob.value == 49.95

    def test_returns_same_object(self):
        """Smoothing is in place."""
        knob = Knob(value=0.0, target=10.0)
        assert smooth(knob, 0.1) is knob


class TestConvergence:
    """Test that repeated smoothing settles and stays settled."""

    @pytest.mark.parametrize("speed", [GAIN_SPEED, EQ_SPEED, FADER_SPEED, CROSSFADER_SPEED])
    def test_converges_and_stays(self, speed):
        """Every control speed eventually settles within 0.1."""
        knob = Knob(value=0.0, target=100.0)
        for _ in range(5000):
            smooth(knob, speed)
        assert is_settled(knob)

        settled_value = knob.value
        for _ in range(100):
            smooth(knob, speed)
        assert knob.value == settled_value

    def test_crossfader_reaches_blend_position(self):
        """Crossfader at 20 converges to 75 at crossfader speed."""
        crossfader = Crossfader()
        assert (crossfader.value, crossfader.target) == (20.0, 20.0)

        crossfader.set_target(75.0)
        for _ in range(2000):
            smooth_crossfader(crossfader)

        assert abs(crossfader.value - 75.0) < 0.1


class TestDeckSmoothing:
    """Test per-field speeds across a deck."""

    def test_distinct_speeds(self):
        """Gain, EQ and fader each move at their own rate."""
        deck = Deck.create("A")
        deck.gain.snap(0.0)
        deck.eq_high.snap(0.0)
        deck.fader.snap(0.0)
        deck.gain.set_target(100.0)
        deck.eq_high.set_target(100.0)
        deck.fader.set_target(100.0)

        smooth_deck(deck)

        assert deck.gain.value == pytest.approx(100.0 * GAIN_SPEED)
        assert deck.eq_high.value == pytest.approx(100.0 * EQ_SPEED)
        assert deck.fader.value == pytest.approx(100.0 * FADER_SPEED)

    def test_gain_settles_before_eq(self):
        """Faster controls visibly settle first."""
        deck = Deck.create("B")
        deck.gain.snap(0.0)
        deck.eq_mid.snap(0.0)
        deck.gain.set_target(100.0)
        deck.eq_mid.set_target(100.0)

        for _ in range(300):
            smooth_deck(deck)

        assert deck.gain.value > deck.eq_mid.value
