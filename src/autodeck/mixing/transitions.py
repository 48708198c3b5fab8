"""
Transition State Machine: phrase-aligned automation of the two decks.

The mixer runs on a normalized phrase clock. One full cycle lasts the
style's transition_seconds; the position in the cycle decides the phase:

    stable     cycle < 0.75    decks beatmatched, EQs drift gently
    preparing  0.75 - 0.80     incoming deck (B) starts playing, cued
    blending   0.80 - 0.92     crossfader, faders and EQs move to B
    completing > 0.92          roles swap, then reset for the next cycle

Phases only ever advance to the next one in that order, at most one step
per slow tick.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import numpy as np

from .harmonic import harmonic_relation
from .styles import MixStyleConfig

logger = logging.getLogger(__name__)

# Countdown is always shown against a nominal 16-bar phrase
NOMINAL_PHRASE_BARS = 16

PREPARE_START = 0.75
BLEND_START = 0.80
COMPLETE_START = 0.92

COMPLETION_DELAY_MS = 1500.0

# Crossfader and fader positions during a transition
BLEND_CROSSFADER = 75.0
BLEND_INCOMING_FADER = 80.0
BLEND_OUTGOING_FADER = 25.0
RESET_CROSSFADER = 20.0
RESET_A_FADER = 85.0
RESET_B_FADER = 15.0
EQ_FLAT = 50.0

# Humanizing EQ drift while stable: high, mid, low bands
WOBBLE_PERIOD_MS = 18000.0
WOBBLE_RATES = np.array([2.0, 1.5, 2.3]) * np.pi
WOBBLE_DEPTHS = np.array([3.0, 2.0, 3.0])
WOBBLE_SHAPE = np.array([0.0, np.pi / 2, 0.0])  # mid band follows cosine
WOBBLE_OFFSETS_A = np.zeros(3)
WOBBLE_OFFSETS_B = np.array([1.0, 0.8, 1.2])


class TransitionPhase(Enum):
    STABLE = "stable"
    PREPARING = "preparing"
    BLENDING = "blending"
    COMPLETING = "completing"

    @property
    def next(self) -> "TransitionPhase":
        order = list(TransitionPhase)
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class PhaseChange:
    """One step of the phase cycle, as reported to listeners."""

    previous: TransitionPhase
    phase: TransitionPhase
    cycle: float
    bars_remaining: int
    status: str


def phrase_cycle(now_ms: float, transition_seconds: float) -> float:
    """
    Position within the current transition cycle.

    Args:
        now_ms: Clock time in milliseconds (>= 0)
        transition_seconds: Cycle length in seconds (>= 1)

    Returns:
        Cycle position in [0.0, 1.0)
    """
    cycle = (now_ms / (transition_seconds * 1000.0)) % 1.0
    # Float modulo can round up to exactly 1.0 for values just below a boundary
    if cycle >= 1.0:
        return 0.0
    return cycle


def bars_remaining(cycle: float) -> int:
    """Bars left in the nominal phrase before the next transition point."""
    return math.ceil((1.0 - cycle) * NOMINAL_PHRASE_BARS)


def wobble_targets(now_ms: float, offsets: np.ndarray) -> np.ndarray:
    """
    EQ targets (high, mid, low) for the slow stable-phase drift.

    Args:
        now_ms: Clock time in milliseconds
        offsets: Per-band phase offsets for the deck

    Returns:
        Array of three targets around 50 (flat)
    """
    eq_cycle = (now_ms / WOBBLE_PERIOD_MS) % 1.0
    return EQ_FLAT + WOBBLE_DEPTHS * np.sin(eq_cycle * WOBBLE_RATES + WOBBLE_SHAPE + offsets)


def status_message(
    phase: TransitionPhase,
    cycle: float,
    style: MixStyleConfig,
    relation: str = "",
) -> str:
    """Status line shown for a phase at a given cycle position."""
    bars = bars_remaining(cycle)

    if phase is TransitionPhase.STABLE:
        return f"Beatmatched — {relation} ({bars} bars)"

    if phase is TransitionPhase.PREPARING:
        return f"Preparing next track — waiting for phrase boundary ({bars} bars)"

    if phase is TransitionPhase.BLENDING:
        seconds = max(0, math.ceil((COMPLETE_START - cycle) * style.transition_seconds))
        return (
            f"Transition: {style.blend_type} • {style.eq_action} • "
            f"time remaining: 0:{seconds:02d}"
        )

    return "Transition complete — beatmatched"


class TransitionStateMachine:
    """
    Drives decks and crossfader through the four-phase transition cycle.

    The machine owns no timers. The caller invokes step() once per slow
    tick and supplies a ``defer`` callable used to schedule the delayed
    reset after a transition completes.
    """

    def __init__(
        self,
        deck_a,
        deck_b,
        crossfader,
        style: MixStyleConfig,
        defer: Callable[[float, Callable[[], None]], Any],
        completion_delay_ms: float = COMPLETION_DELAY_MS,
    ):
        """
        Args:
            deck_a: Deck A (outgoing at the start of every cycle)
            deck_b: Deck B (incoming at the start of every cycle)
            crossfader: Shared crossfader
            style: Active mix style configuration
            defer: Callable(delay_ms, callback) scheduling a one-shot callback
            completion_delay_ms: Delay before the post-transition reset
        """
        self.deck_a = deck_a
        self.deck_b = deck_b
        self.crossfader = crossfader
        self.style = style
        self.defer = defer
        self.completion_delay_ms = completion_delay_ms

        self.phase = TransitionPhase.STABLE
        self.cycle = 0.0
        self.bars_remaining = NOMINAL_PHRASE_BARS
        self.status = self._initial_status()

    def _initial_status(self) -> str:
        return f"Beatmatched — waiting for phrase boundary ({self.bars_remaining} bars)"

    def reset(self, now_ms: float) -> None:
        """
        Return to the stable phase at the given clock time.

        A transition interrupted before its deferred reset ran leaves the
        decks crossed over, so the reset is applied here instead.
        """
        if self.phase is not TransitionPhase.STABLE:
            logger.debug(f"Reset during {self.phase.value}: restoring deck A lead")
            self._finish_transition()

        self.phase = TransitionPhase.STABLE
        self.cycle = phrase_cycle(now_ms, self.style.transition_seconds)
        self.bars_remaining = bars_remaining(self.cycle)
        self.status = self._initial_status()

    def set_style(self, style: MixStyleConfig) -> None:
        """Switch mix style; the current phase carries on under the new timing."""
        self.style = style

    def step(self, now_ms: float) -> Optional[PhaseChange]:
        """
        Run one slow tick of automation.

        Args:
            now_ms: Clock time in milliseconds

        Returns:
            PhaseChange if the phase advanced this tick, else None
        """
        cycle = phrase_cycle(now_ms, self.style.transition_seconds)
        self.cycle = cycle
        self.bars_remaining = bars_remaining(cycle)

        was_stable = self.phase is TransitionPhase.STABLE
        change = None

        if PREPARE_START < cycle < BLEND_START and self.phase is TransitionPhase.STABLE:
            self.deck_b.playing = True
            change = self._advance(TransitionPhase.PREPARING)

        elif BLEND_START < cycle < COMPLETE_START and self.phase is TransitionPhase.PREPARING:
            self._start_blend()
            change = self._advance(TransitionPhase.BLENDING)

        elif cycle > COMPLETE_START and self.phase is TransitionPhase.BLENDING:
            self.deck_a.active = False
            self.deck_b.active = True
            self.defer(self.completion_delay_ms, self._finish_transition)
            change = self._advance(TransitionPhase.COMPLETING)

        elif cycle < PREPARE_START and self.phase is not TransitionPhase.STABLE:
            change = self._advance(TransitionPhase.STABLE)

        if was_stable:
            self._humanize(now_ms)

        return change

    def _advance(self, phase: TransitionPhase) -> PhaseChange:
        previous = self.phase
        self.phase = phase

        relation = ""
        if phase is TransitionPhase.STABLE:
            relation = harmonic_relation(self.deck_a.key, self.deck_b.key)
        self.status = status_message(phase, self.cycle, self.style, relation)

        logger.debug(
            f"Phase {previous.value} → {phase.value} "
            f"(cycle={self.cycle:.3f}, bars={self.bars_remaining})"
        )
        return PhaseChange(
            previous=previous,
            phase=phase,
            cycle=self.cycle,
            bars_remaining=self.bars_remaining,
            status=self.status,
        )

    def _start_blend(self) -> None:
        intensity = self.style.eq_intensity

        self.crossfader.set_target(BLEND_CROSSFADER)

        # Bring in the incoming deck
        self.deck_b.fader.set_target(BLEND_INCOMING_FADER)
        self.deck_b.eq_low.set_target(EQ_FLAT - intensity * 0.5)

        # Pull back the outgoing deck
        self.deck_a.fader.set_target(BLEND_OUTGOING_FADER)
        self.deck_a.eq_high.set_target(EQ_FLAT - intensity * 0.8)

    def _finish_transition(self) -> None:
        """Deferred reset: deck A takes the lead again for the next cycle."""
        self.crossfader.set_target(RESET_CROSSFADER)

        self.deck_a.active = True
        self.deck_a.fader.set_target(RESET_A_FADER)
        self.deck_a.eq_high.set_target(EQ_FLAT)

        self.deck_b.active = False
        self.deck_b.fader.set_target(RESET_B_FADER)
        self.deck_b.eq_low.set_target(EQ_FLAT)

        logger.debug("Transition reset: deck A leading, crossfader back to 20")

    def _humanize(self, now_ms: float) -> None:
        for deck, offsets in ((self.deck_a, WOBBLE_OFFSETS_A), (self.deck_b, WOBBLE_OFFSETS_B)):
            high, mid, low = wobble_targets(now_ms, offsets)
            deck.eq_high.set_target(float(high))
            deck.eq_mid.set_target(float(mid))
            deck.eq_low.set_target(float(low))
