"""
Auto DJ engine: two decks, one crossfader, running without a DJ.

Composes the deck model, parameter smoother and transition state machine
on a single Scheduler:

- fast tick (50 ms): smooth every knob, fader and the crossfader, scroll waveforms
- slow tick (200 ms): one step of the transition state machine
- one-shot (1500 ms): post-transition reset, scheduled by the state machine

All state changes happen under one lock, so the UI thread can take
snapshots while the runner thread ticks the engine.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from ..config import Config
from ..deck import Crossfader, Deck, DeckSide, eq_to_db
from ..mixing.smoother import smooth_crossfader, smooth_deck
from ..mixing.styles import MixStyle, MixStyleConfig, get_style, parse_style
from ..mixing.transitions import PhaseChange, TransitionPhase, TransitionStateMachine
from .scheduler import ScheduledEvent, Scheduler

logger = logging.getLogger(__name__)

PhaseListener = Callable[[PhaseChange], None]


@dataclass(frozen=True)
class MixerSnapshot:
    """Read-only copy of the mixer state for the UI and the audio engine."""

    now_ms: float
    phase: TransitionPhase
    status: str
    cycle: float
    bars_remaining: int
    mix_style: MixStyle
    crossfader: Dict[str, float]
    deck_a: Dict[str, Any]
    deck_b: Dict[str, Any]

    def deck(self, side) -> Dict[str, Any]:
        return self.deck_a if DeckSide.parse(side) is DeckSide.A else self.deck_b


def _deck_snapshot(deck: Deck) -> Dict[str, Any]:
    data = deck.to_dict()
    data["eq_db"] = {
        "high": eq_to_db(deck.eq_high.value),
        "mid": eq_to_db(deck.eq_mid.value),
        "low": eq_to_db(deck.eq_low.value),
    }
    return data


class AutoDJEngine:
    """
    Autonomous two-deck mixer.

    The engine owns all mixer state; several engines can coexist. Drive it
    with tick(delta_ms), either from a RealtimeRunner or directly in tests.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        mix_style: Union[MixStyle, str, None] = None,
        start_ms: float = 0.0,
    ):
        """
        Args:
            config: Validated Config; defaults are used if None
            mix_style: Initial style; overrides config mix.style
            start_ms: Initial clock time in milliseconds
        """
        self.config = config or Config.defaults()
        self.fast_tick_ms = self.config.get("engine", "fast_tick_ms", 50)
        self.slow_tick_ms = self.config.get("engine", "slow_tick_ms", 200)
        completion_delay_ms = self.config.get("engine", "completion_delay_ms", 1500)

        self.mix_style = parse_style(mix_style or self.config.get("mix", "style", "club"))

        self.scheduler = Scheduler(start_ms=start_ms)
        self.lock = threading.RLock()

        self.deck_a = Deck.create(DeckSide.A)
        self.deck_b = Deck.create(DeckSide.B)
        self.crossfader = Crossfader()

        self.transitions = TransitionStateMachine(
            self.deck_a,
            self.deck_b,
            self.crossfader,
            self._style_config(self.mix_style),
            defer=self._defer,
            completion_delay_ms=completion_delay_ms,
        )

        self._listeners: List[PhaseListener] = []
        self.running = False

        logger.info(f"AutoDJEngine initialized (style: {self.mix_style.value})")

    def _style_config(self, style: MixStyle) -> MixStyleConfig:
        return get_style(style, self.config.style_overrides(style.value))

    def _defer(self, delay_ms: float, callback: Callable[[], None]) -> ScheduledEvent:
        return self.scheduler.after(delay_ms, callback, name="complete_transition")

    # Lifecycle

    def start(self) -> None:
        """Register the fast and slow ticks. Calling start twice is a no-op."""
        with self.lock:
            if self.running:
                return
            self.transitions.reset(self.scheduler.now_ms)
            self.scheduler.every(self.fast_tick_ms, self.fast_tick, name="fast_tick")
            self.scheduler.every(self.slow_tick_ms, self.slow_tick, name="slow_tick")
            self.running = True

        logger.info(
            f"🎛️ Auto DJ started: {self.mix_style.value} "
            f"(fast {self.fast_tick_ms}ms, slow {self.slow_tick_ms}ms)"
        )

    def stop(self) -> None:
        """Cancel both ticks and any pending transition reset."""
        with self.lock:
            if not self.running:
                return
            cancelled = self.scheduler.cancel_all()
            self.running = False

        logger.info(f"Auto DJ stopped ({cancelled} scheduled events cancelled)")

    def tick(self, delta_ms: float) -> int:
        """Advance the engine clock; returns the number of callbacks fired."""
        with self.lock:
            return self.scheduler.tick(delta_ms)

    @property
    def now_ms(self) -> float:
        return self.scheduler.now_ms

    # Tick handlers

    def fast_tick(self) -> None:
        """Smooth every control one step and advance waveform scrolling."""
        with self.lock:
            smooth_deck(self.deck_a)
            smooth_deck(self.deck_b)
            smooth_crossfader(self.crossfader)

            self.deck_a.advance_scroll()
            self.deck_b.advance_scroll()

    def slow_tick(self) -> Optional[PhaseChange]:
        """Run one step of transition automation."""
        with self.lock:
            change = self.transitions.step(self.scheduler.now_ms)

        if change is not None:
            logger.info(f"[{change.phase.value}] {change.status}")
            for listener in list(self._listeners):
                listener(change)

        return change

    def add_listener(self, listener: PhaseListener) -> None:
        """Call listener(PhaseChange) on every phase change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: PhaseListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Track library and user controls

    def deck(self, side) -> Deck:
        return self.deck_a if DeckSide.parse(side) is DeckSide.A else self.deck_b

    def load_track_to_deck(self, track, side) -> None:
        """Load a track (autodeck.library.Track) onto deck A or B."""
        with self.lock:
            self.deck(side).load_track(track)

    def clear_deck(self, side) -> None:
        with self.lock:
            self.deck(side).clear()

    def set_mix_style(self, style: Union[MixStyle, str]) -> MixStyleConfig:
        """
        Switch mix style; the current phase continues under the new timing.

        Raises:
            UnknownMixStyleError: If the style name is unknown
        """
        style = parse_style(style)
        config = self._style_config(style)
        with self.lock:
            self.mix_style = style
            self.transitions.set_style(config)

        logger.info(
            f"Mix style set to {style.value} "
            f"({config.blend_bars} bars, EQ {config.eq_intensity}, {config.transition_seconds}s)"
        )
        return config

    def set_target(self, side, control: str, value: float) -> None:
        """
        User drag on a knob or fader: only the target moves, the value follows.

        Raises:
            ValueError: For an unknown side/control or a non-finite value
        """
        with self.lock:
            self.deck(side).control(control).set_target(value)

    def set_crossfader_target(self, value: float) -> None:
        with self.lock:
            self.crossfader.set_target(value)

    def toggle_effect(self, side, effect: str) -> bool:
        with self.lock:
            return self.deck(side).toggle_effect(effect)

    # Read side

    @property
    def phase(self) -> TransitionPhase:
        return self.transitions.phase

    @property
    def status_message(self) -> str:
        return self.transitions.status

    def snapshot(self) -> MixerSnapshot:
        """Consistent copy of all mixer state."""
        with self.lock:
            return MixerSnapshot(
                now_ms=self.scheduler.now_ms,
                phase=self.transitions.phase,
                status=self.transitions.status,
                cycle=self.transitions.cycle,
                bars_remaining=self.transitions.bars_remaining,
                mix_style=self.mix_style,
                crossfader={"value": self.crossfader.value, "target": self.crossfader.target},
                deck_a=_deck_snapshot(self.deck_a),
                deck_b=_deck_snapshot(self.deck_b),
            )

    def __repr__(self) -> str:
        return (
            f"AutoDJEngine(style={self.mix_style.value}, phase={self.phase.value}, "
            f"running={self.running})"
        )
