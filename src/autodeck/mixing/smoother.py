"""
Parameter Smoother: ease knob, fader and crossfader values toward their targets.

Every fast tick each control moves a fixed fraction of the remaining
distance to its target (exponential approach). Different control types
use different speeds so they visibly settle at different rates, which is
what makes the automated mixer feel motorized rather than snapped.
"""

import logging

logger = logging.getLogger(__name__)

# Below this distance a control counts as settled and is left alone.
SETTLE_THRESHOLD = 0.1

GAIN_SPEED = 0.012
EQ_SPEED = 0.007
FADER_SPEED = 0.01
CROSSFADER_SPEED = 0.006


def smooth(param, speed: float):
    """
    Move one control a step toward its target.

    Args:
        param: Object with float ``value`` and ``target`` attributes
        speed: Fraction of the remaining distance covered this tick (0.0-1.0)

    Returns:
        The same object, with ``value`` updated in place. ``target`` is never touched.
    """
    diff = param.target - param.value
    if abs(diff) < SETTLE_THRESHOLD:
        return param
    param.value += diff * speed
    return param


def is_settled(param) -> bool:
    """True when a control is close enough to its target to stop moving."""
    return abs(param.target - param.value) < SETTLE_THRESHOLD


def smooth_deck(deck) -> None:
    """Apply one smoothing step to every knob and the fader of a deck."""
    smooth(deck.gain, GAIN_SPEED)
    smooth(deck.eq_high, EQ_SPEED)
    smooth(deck.eq_mid, EQ_SPEED)
    smooth(deck.eq_low, EQ_SPEED)
    smooth(deck.fader, FADER_SPEED)


def smooth_crossfader(crossfader) -> None:
    smooth(crossfader, CROSSFADER_SPEED)
