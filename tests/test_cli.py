"""
Tests for the command-line entrypoint and the real-time runner.
"""

import json
import time

import pytest

from autodeck.cli import build_parser, main, run
from autodeck.engine.mixer import AutoDJEngine
from autodeck.engine.runner import RealtimeRunner
from autodeck.mixing.styles import MixStyle
from autodeck.mixing.transitions import TransitionPhase


@pytest.fixture
def missing_config(tmp_path):
    return str(tmp_path / "missing.toml")


@pytest.fixture
def library_file(tmp_path):
    path = tmp_path / "tracks.json"
    path.write_text(json.dumps([
        {"id": "a1", "title": "Warmup", "bpm": 126, "key": "Am"},
        {"id": "b1", "title": "Lift", "bpm": 128, "key": "Em"},
    ]))
    return str(path)


class TestRun:
    """Test simulated runs."""

    def test_simulated_mix(self, missing_config, library_file):
        args = build_parser().parse_args([
            "--config", missing_config,
            "--style", "aggressive",
            "--seconds", "20",
            "--library", library_file,
            "--deck-a", "a1",
            "--deck-b", "b1",
        ])
        engine = run(args)

        assert engine.mix_style is MixStyle.AGGRESSIVE
        assert not engine.running
        assert engine.now_ms == 20000.0
        assert engine.deck_a.track_id == "a1"
        assert engine.deck_b.playing
        assert engine.phase is TransitionPhase.STABLE

    def test_main_success(self, missing_config):
        assert main(["--config", missing_config, "--seconds", "5"]) == 0

    def test_main_unknown_track(self, missing_config, library_file):
        code = main([
            "--config", missing_config,
            "--library", library_file,
            "--deck-a", "zzz",
        ])
        assert code == 1

    def test_deck_without_library(self, missing_config):
        assert main(["--config", missing_config, "--deck-b", "b1"]) == 1

    def test_non_positive_duration(self, missing_config):
        assert main(["--config", missing_config, "--seconds", "0"]) == 1

    def test_bad_config(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[engine]\nfast_tick_ms = 1\n")
        assert main(["--config", str(path), "--seconds", "1"]) == 1


class TestRealtimeRunner:
    """Test the wall-clock runner thread."""

    def test_runner_ticks_and_stops(self):
        engine = AutoDJEngine(mix_style="club", start_ms=0.0)
        runner = RealtimeRunner(engine, resolution_ms=5.0)

        runner.start()
        time.sleep(0.3)
        runner.stop()

        assert engine.now_ms > 0.0
        assert not runner.running
        assert not engine.running
        assert engine.scheduler.pending() == []

    def test_invalid_resolution(self):
        with pytest.raises(ValueError):
            RealtimeRunner(AutoDJEngine(), resolution_ms=0)
