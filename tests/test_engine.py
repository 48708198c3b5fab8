"""
Integration tests for AutoDJEngine on a simulated clock.
"""

import pytest
from dataclasses import FrozenInstanceError

from autodeck.engine.mixer import AutoDJEngine
from autodeck.mixing.styles import MixStyle, UnknownMixStyleError
from autodeck.mixing.transitions import TransitionPhase


def run_until(engine, predicate, step_ms=50.0, limit_ms=120000.0):
    """Tick the engine until predicate() is true; fail after limit_ms."""
    elapsed = 0.0
    while not predicate():
        if elapsed >= limit_ms:
            raise AssertionError(f"Condition not reached within {limit_ms}ms")
        engine.tick(step_ms)
        elapsed += step_ms
    return elapsed


class TestLifecycle:
    """Test start/stop and timer registration."""

    def test_start_registers_ticks(self, engine):
        engine.start()
        names = sorted(event.name for event in engine.scheduler.pending())
        assert names == ["fast_tick", "slow_tick"]
        assert engine.running

    def test_start_twice(self, engine):
        engine.start()
        engine.start()
        assert len(engine.scheduler.pending()) == 2

    def test_nothing_happens_before_start(self, engine):
        engine.tick(30000)
        assert engine.phase is TransitionPhase.STABLE
        assert not engine.deck_b.playing

    def test_stop_cancels_pending_reset(self, engine):
        """Stopping mid-transition prevents the deferred reset."""
        engine.start()
        run_until(engine, lambda: engine.phase is TransitionPhase.COMPLETING)
        assert any(e.name == "complete_transition" for e in engine.scheduler.pending())

        engine.stop()
        engine.tick(5000)

        assert not engine.running
        assert engine.scheduler.pending() == []
        assert engine.crossfader.target == 75.0
        assert not engine.deck_a.active

    def test_restart_after_interrupted_transition(self, engine):
        """Restarting hands the lead back to deck A when the reset was cancelled."""
        engine.start()
        run_until(engine, lambda: engine.phase is TransitionPhase.COMPLETING)
        engine.stop()

        engine.start()

        assert engine.phase is TransitionPhase.STABLE
        assert engine.deck_a.active
        assert not engine.deck_b.active
        assert engine.crossfader.target == 20.0
        assert engine.deck_a.fader.target == 85.0
        assert engine.deck_b.fader.target == 15.0
        assert [e.name for e in engine.scheduler.pending()] == ["fast_tick", "slow_tick"]


class TestAutomation:
    """Test the transition cycle through the scheduler."""

    def test_full_cycle_order(self, engine):
        """Phases cycle in order over several transitions."""
        phases = []
        engine.add_listener(lambda change: phases.append(change.phase))
        engine.start()

        engine.tick(22000 * 5)

        expected = [
            TransitionPhase.PREPARING,
            TransitionPhase.BLENDING,
            TransitionPhase.COMPLETING,
            TransitionPhase.STABLE,
        ]
        assert len(phases) >= 16
        for index, phase in enumerate(phases):
            assert phase is expected[index % 4]

    def test_club_preparing_starts_deck_b(self, engine):
        engine.start()
        engine.tick(16800)
        assert engine.phase is TransitionPhase.PREPARING
        assert engine.deck_b.playing

    def test_aggressive_blend_targets(self, config):
        engine = AutoDJEngine(config, mix_style="aggressive")
        engine.start()
        run_until(engine, lambda: engine.phase is TransitionPhase.BLENDING)

        assert engine.deck_a.eq_high.target == pytest.approx(43.6)
        assert engine.deck_b.eq_low.target == pytest.approx(46.0)
        assert engine.crossfader.target == 75.0

    def test_crossfader_moves_toward_blend(self, engine):
        engine.start()
        run_until(engine, lambda: engine.phase is TransitionPhase.BLENDING)
        start_value = engine.crossfader.value

        engine.tick(1000)

        assert engine.crossfader.value > start_value
        assert engine.crossfader.value < 75.0

    def test_completion_reset_fires(self, engine):
        engine.start()
        run_until(engine, lambda: engine.phase is TransitionPhase.COMPLETING)
        assert engine.deck_b.active
        assert not engine.deck_a.active

        engine.tick(1500)

        assert engine.deck_a.active
        assert not engine.deck_b.active
        assert engine.crossfader.target == 20.0
        assert engine.deck_b.fader.target == 15.0

    def test_empty_decks_run_full_cycle(self, engine):
        """No tracks loaded: the cycle still runs, nothing scrolls."""
        engine.start()
        engine.tick(23000)

        assert engine.deck_b.playing
        assert engine.deck_b.bpm == 0
        assert engine.deck_b.scroll_pos == 0.0
        assert engine.phase is TransitionPhase.STABLE

    def test_engines_are_independent(self, config):
        club = AutoDJEngine(config, mix_style="club")
        aggressive = AutoDJEngine(config, mix_style="aggressive")
        club.start()
        aggressive.start()

        aggressive.tick(14000)

        assert aggressive.phase is TransitionPhase.PREPARING
        assert club.phase is TransitionPhase.STABLE
        assert club.now_ms == 0.0


class TestTrackLibraryInterface:
    """Test load/clear from the track library."""

    def test_load_and_scroll(self, engine, track_a):
        """Deck A at 126 BPM, active and playing scrolls 0.35 per fast tick."""
        engine.load_track_to_deck(track_a, "A")
        engine.deck_a.playing = True

        engine.fast_tick()

        assert engine.deck_a.scroll_pos == pytest.approx(0.35)

    def test_stable_status_uses_keys(self, engine, track_a, track_b):
        engine.load_track_to_deck(track_a, "A")
        engine.load_track_to_deck(track_b, "B")
        engine.start()

        engine.tick(22400)

        assert engine.phase is TransitionPhase.STABLE
        assert engine.status_message.startswith("Beatmatched — harmonic match (±1 semitone)")

    def test_clear_deck(self, engine, track_b):
        engine.load_track_to_deck(track_b, "b")
        engine.clear_deck("B")
        deck = engine.deck("B")
        assert deck.bpm == 0
        assert deck.key == "—"
        assert not deck.active
        assert deck.vu_level == 0.0


class TestControls:
    """Test user-facing control surface."""

    def test_set_target(self, engine):
        engine.set_target("A", "gain", 90.0)
        assert engine.deck_a.gain.target == 90.0
        assert engine.deck_a.gain.value == 75.0

    def test_set_target_validation(self, engine):
        with pytest.raises(ValueError):
            engine.set_target("A", "gain", float("nan"))
        with pytest.raises(ValueError):
            engine.set_target("A", "volume", 10.0)
        with pytest.raises(ValueError):
            engine.set_target("C", "gain", 10.0)

    def test_set_mix_style(self, engine):
        config = engine.set_mix_style("hypnotic")
        assert engine.mix_style is MixStyle.HYPNOTIC
        assert config.transition_seconds == 35
        assert engine.transitions.style.transition_seconds == 35

    def test_set_unknown_style(self, engine):
        with pytest.raises(UnknownMixStyleError):
            engine.set_mix_style("dubstep")
        assert engine.mix_style is MixStyle.CLUB

    def test_toggle_effect(self, engine):
        assert engine.toggle_effect("A", "reverb") is True


class TestSnapshot:
    """Test read-only state snapshots."""

    def test_snapshot_contents(self, engine):
        snapshot = engine.snapshot()
        assert snapshot.phase is TransitionPhase.STABLE
        assert snapshot.mix_style is MixStyle.CLUB
        assert snapshot.crossfader == {"value": 20.0, "target": 20.0}
        assert snapshot.deck("a")["key"] == "—"
        assert snapshot.deck_b["eq_db"] == {"high": 0.0, "mid": 0.0, "low": 0.0}

    def test_snapshot_is_a_copy(self, engine):
        snapshot = engine.snapshot()
        engine.set_target("A", "fader", 10.0)
        assert snapshot.deck_a["fader"]["target"] == 85.0

    def test_snapshot_frozen(self, engine):
        with pytest.raises(FrozenInstanceError):
            engine.snapshot().status = "hacked"
