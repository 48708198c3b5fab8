"""
Engine Module: run the mixer on a clock.

- Deterministic tick scheduler (periodic + one-shot events)
- AutoDJEngine composing decks, smoother and transition automation
- Real-time runner feeding wall-clock time to the scheduler
"""

__all__ = ["scheduler", "mixer", "runner"]
