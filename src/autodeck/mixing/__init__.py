"""
Mixing Module: the rules that move the mixer between phrases.

- Mix style registry (blend length, EQ intensity, phrase length)
- Camelot-wheel harmonic relation between the two decks
- Exponential parameter smoothing for knobs, faders and crossfader
- Phrase-aligned transition state machine
"""

__all__ = ["styles", "harmonic", "smoother", "transitions"]
