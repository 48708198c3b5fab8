"""
Tick Scheduler: periodic and one-shot events on a virtual millisecond clock.

Time only moves when tick(delta_ms) is called, either by the real-time
runner with wall-clock deltas or directly by tests. Events fire in time
order (ties in registration order) and each callback runs to completion
before the next one starts.
"""

import heapq
import itertools
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ScheduledEvent:
    """Handle for a registered periodic or one-shot event."""

    def __init__(
        self,
        due_ms: float,
        callback: Callable[[], None],
        period_ms: Optional[float] = None,
        name: str = "",
    ):
        self.due_ms = due_ms
        self.callback = callback
        self.period_ms = period_ms
        self.name = name or getattr(callback, "__name__", "event")
        self.cancelled = False
        self.fired = 0

    @property
    def periodic(self) -> bool:
        return self.period_ms is not None

    def __repr__(self) -> str:
        kind = f"every {self.period_ms}ms" if self.periodic else "once"
        return f"ScheduledEvent({self.name}, due={self.due_ms}, {kind})"


class Scheduler:
    """Deterministic event scheduler driven by explicit ticks."""

    def __init__(self, start_ms: float = 0.0):
        """
        Args:
            start_ms: Initial value of the virtual clock
        """
        self.now_ms = float(start_ms)
        self._queue: List[tuple] = []
        self._counter = itertools.count()
        self._events: List[ScheduledEvent] = []

    def _push(self, event: ScheduledEvent) -> None:
        heapq.heappush(self._queue, (event.due_ms, next(self._counter), event))

    def every(self, period_ms: float, callback: Callable[[], None], name: str = "") -> ScheduledEvent:
        """
        Register a periodic event, first firing one period from now.

        Raises:
            ValueError: If period_ms is not positive
        """
        if period_ms <= 0:
            raise ValueError(f"Period must be positive, got {period_ms}")

        event = ScheduledEvent(self.now_ms + period_ms, callback, period_ms=period_ms, name=name)
        self._events.append(event)
        self._push(event)
        logger.debug(f"Scheduled {event}")
        return event

    def after(self, delay_ms: float, callback: Callable[[], None], name: str = "") -> ScheduledEvent:
        """
        Register a one-shot event firing delay_ms from now.

        Raises:
            ValueError: If delay_ms is negative
        """
        if delay_ms < 0:
            raise ValueError(f"Delay must not be negative, got {delay_ms}")

        event = ScheduledEvent(self.now_ms + delay_ms, callback, name=name)
        self._events.append(event)
        self._push(event)
        logger.debug(f"Scheduled {event}")
        return event

    def cancel(self, event: ScheduledEvent) -> None:
        """Cancel an event; it will never fire again."""
        event.cancelled = True
        if event in self._events:
            self._events.remove(event)

    def cancel_all(self) -> int:
        """
        Cancel every pending event.

        Returns:
            Number of events cancelled
        """
        count = len(self._events)
        for event in self._events:
            event.cancelled = True
        self._events = []
        self._queue = []
        if count:
            logger.debug(f"Cancelled {count} scheduled events")
        return count

    def pending(self) -> List[ScheduledEvent]:
        """Events that may still fire, in registration order."""
        return list(self._events)

    def tick(self, delta_ms: float) -> int:
        """
        Advance the clock and fire every event that falls due.

        A periodic event fires once per elapsed period, so a large delta
        catches up with several firings.

        Args:
            delta_ms: Milliseconds to advance (>= 0)

        Returns:
            Number of callbacks fired

        Raises:
            ValueError: If delta_ms is negative
        """
        if delta_ms < 0:
            raise ValueError(f"Cannot tick backwards ({delta_ms}ms)")

        deadline = self.now_ms + delta_ms
        fired = 0

        while self._queue and self._queue[0][0] <= deadline:
            due_ms, _, event = heapq.heappop(self._queue)
            if event.cancelled:
                continue

            self.now_ms = due_ms
            if event.periodic:
                event.due_ms = due_ms + event.period_ms
                self._push(event)
            elif event in self._events:
                self._events.remove(event)

            event.fired += 1
            fired += 1
            event.callback()

        self.now_ms = deadline
        return fired
