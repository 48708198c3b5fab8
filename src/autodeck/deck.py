"""
Deck Model: per-side playback and parameter state.

Two decks (A and B) and one crossfader are created when the engine starts
and are mutated in place for its whole lifetime. Clearing a deck resets
its track fields; the knobs keep moving under automation.
"""

import logging
import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

NO_TRACK_TITLE = "No Track Loaded"
EMPTY_FIELD = "—"

# Waveform scroll speed per fast tick, in percent of the visible window
ACTIVE_SCROLL_SPEED = 0.35
CUED_SCROLL_SPEED = 0.12

EFFECTS = ("echo", "reverb", "filter")
CONTROLS = ("gain", "eq_high", "eq_mid", "eq_low", "fader")


class DeckSide(Enum):
    A = "A"
    B = "B"

    @classmethod
    def parse(cls, side) -> "DeckSide":
        if isinstance(side, DeckSide):
            return side
        try:
            return cls(str(side).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown deck side {side!r}; expected 'A' or 'B'")

    @property
    def reference_bpm(self) -> float:
        """BPM at which the waveform scrolls at its nominal speed."""
        return 126.0 if self is DeckSide.A else 128.0


@dataclass
class Knob:
    """A rotary control whose value chases its target."""

    value: float
    target: float
    minimum: float = 0.0
    maximum: float = 100.0

    def set_target(self, target: float) -> None:
        """
        Set a new target, e.g. from a user drag or the automation.

        Args:
            target: New target; clamped into [minimum, maximum]

        Raises:
            ValueError: If target is not a finite number
        """
        if isinstance(target, bool) or not isinstance(target, (int, float)):
            raise ValueError(f"Target must be a number, got {target!r}")
        if not math.isfinite(target):
            raise ValueError(f"Target must be finite, got {target!r}")
        self.target = float(min(self.maximum, max(self.minimum, target)))

    def snap(self, value: float) -> None:
        """Jump value and target to the same position."""
        self.set_target(value)
        self.value = self.target


@dataclass
class Fader(Knob):
    """Channel volume fader. Same shape as a knob, smoothed at its own speed."""
    pass


@dataclass
class Crossfader(Knob):
    """Blend between deck A (0) and deck B (100)."""

    value: float = 20.0
    target: float = 20.0


@dataclass
class Deck:
    """Playback and parameter state for one side of the mixer."""

    side: DeckSide
    gain: Knob
    eq_high: Knob = field(default_factory=lambda: Knob(50.0, 50.0))
    eq_mid: Knob = field(default_factory=lambda: Knob(50.0, 50.0))
    eq_low: Knob = field(default_factory=lambda: Knob(50.0, 50.0))
    fader: Fader = field(default_factory=lambda: Fader(50.0, 50.0))
    active: bool = False
    playing: bool = False
    bpm: int = 0
    key: str = EMPTY_FIELD
    track_id: Optional[str] = None
    title: str = NO_TRACK_TITLE
    artist: str = EMPTY_FIELD
    artwork: Optional[str] = None
    energy: Optional[str] = None
    vu_level: float = 0.0
    scroll_pos: float = 0.0
    effects: Dict[str, bool] = field(default_factory=lambda: {name: False for name in EFFECTS})

    @classmethod
    def create(cls, side) -> "Deck":
        """Build a deck with the default mixer positions for its side."""
        side = DeckSide.parse(side)
        if side is DeckSide.A:
            return cls(side=side, gain=Knob(75.0, 75.0), fader=Fader(85.0, 85.0))
        return cls(side=side, gain=Knob(72.0, 72.0), fader=Fader(15.0, 15.0))

    @property
    def loaded(self) -> bool:
        return self.track_id is not None

    def control(self, name: str) -> Knob:
        """Look up a knob or fader by name ("gain", "eq_high", ..., "fader")."""
        if name not in CONTROLS:
            raise ValueError(f"Unknown control {name!r}; expected one of {CONTROLS}")
        return getattr(self, name)

    def load_track(self, track) -> None:
        """
        Write a track's static fields into this deck.

        Args:
            track: Object with id, title, artist, bpm, key and optional
                   artwork/energy attributes (see autodeck.library.Track)
        """
        self.track_id = track.id
        self.title = track.title
        self.artist = track.artist
        self.bpm = int(track.bpm)
        self.key = track.key
        self.artwork = getattr(track, "artwork", None)
        self.energy = getattr(track, "energy", None)
        self.active = True
        self.vu_level = 75.0 if self.side is DeckSide.A else 25.0

        logger.info(f"Loaded {track.id} to deck {self.side.value} ({self.bpm} BPM, {self.key})")

    def clear(self) -> None:
        """Unload the track; the deck stops and goes silent."""
        self.track_id = None
        self.title = NO_TRACK_TITLE
        self.artist = EMPTY_FIELD
        self.bpm = 0
        self.key = EMPTY_FIELD
        self.artwork = None
        self.energy = None
        self.playing = False
        self.active = False
        self.vu_level = 0.0

        logger.info(f"Cleared deck {self.side.value}")

    def toggle_effect(self, effect: str) -> bool:
        """Flip an effect switch and return its new state."""
        if effect not in self.effects:
            raise ValueError(f"Unknown effect {effect!r}; expected one of {EFFECTS}")
        self.effects[effect] = not self.effects[effect]
        return self.effects[effect]

    def advance_scroll(self) -> float:
        """
        Advance the waveform scroll position by one fast tick.

        Only a playing deck scrolls. The speed scales with the track BPM
        relative to the side's reference BPM, and the active deck scrolls
        faster than the cued one.

        Returns:
            New scroll position in [0, 100)
        """
        if not self.playing:
            return self.scroll_pos

        base = ACTIVE_SCROLL_SPEED if self.active else CUED_SCROLL_SPEED
        step = base * (self.bpm / self.side.reference_bpm)
        self.scroll_pos = (self.scroll_pos + step) % 100.0
        return self.scroll_pos

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        data = asdict(self)
        data["side"] = self.side.value
        return data


def eq_to_db(value: float) -> float:
    """Map an EQ knob position (0-100, 50 = flat) to gain in dB (-12 to +12)."""
    return ((value - 50.0) / 50.0) * 12.0
