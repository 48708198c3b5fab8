"""
Real-time runner: drive an AutoDJEngine from the wall clock on a background thread.
"""

import logging
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)


def wall_clock_ms() -> float:
    """Epoch milliseconds, the clock the phrase cycle is aligned to."""
    return time.time() * 1000.0


class RealtimeRunner:
    """
    Background thread that ticks an engine with measured elapsed time.

    The engine should be created with ``start_ms=wall_clock_ms()`` so its
    phrase clock lines up with real time.
    """

    def __init__(self, engine, resolution_ms: float = 10.0):
        """
        Args:
            engine: AutoDJEngine to drive
            resolution_ms: Sleep between ticks; must be below the fast tick period
        """
        if resolution_ms <= 0:
            raise ValueError(f"resolution_ms must be positive, got {resolution_ms}")

        self.engine = engine
        self.resolution_ms = resolution_ms
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the engine and the ticking thread."""
        if self.running:
            return

        self._stop.clear()
        self.engine.start()
        self._thread = threading.Thread(target=self._run, name="autodeck-runner", daemon=True)
        self._thread.start()
        logger.info(f"Realtime runner started (resolution {self.resolution_ms}ms)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop ticking, then stop the engine so no callback fires after teardown."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Realtime runner thread did not exit in time")
            self._thread = None

        self.engine.stop()
        logger.info("Realtime runner stopped")

    def run_for(self, seconds: float) -> None:
        """Run in the foreground for a fixed wall-clock duration."""
        self.start()
        try:
            self._stop.wait(seconds)
        finally:
            self.stop()

    def _run(self) -> None:
        last = time.monotonic()
        while not self._stop.wait(self.resolution_ms / 1000.0):
            now = time.monotonic()
            self.engine.tick((now - last) * 1000.0)
            last = now
