"""
Deferred state transitions.

The round controller never blocks: the part of a check action that waits
for the result display window is queued here and resolved later by the
presentation loop (`poll`) or by a turn-based driver (`flush`).
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class DeferredTransition:
    """A callback due at a point on the scheduler's clock."""
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class DeferredScheduler:
    """
    Min-heap of pending transitions keyed by due time.

    Attributes:
        clock: Callable returning the current time in seconds
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize scheduler.

        Args:
            clock: Time source (defaults to time.monotonic)
        """
        self.clock = clock or time.monotonic
        self._heap: list[DeferredTransition] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return sum(1 for t in self._heap if not t.cancelled)

    @property
    def pending(self) -> bool:
        return len(self) > 0

    def schedule(self, delay: float, callback: Callable[[], None], label: str = "") -> DeferredTransition:
        """
        Queue a callback to run `delay` seconds from now.

        Args:
            delay: Seconds to wait (negative values are treated as 0)
            callback: Zero-argument callable
            label: Name used in log messages

        Returns:
            Handle that can be cancelled
        """
        transition = DeferredTransition(
            due=self.clock() + max(0.0, float(delay)),
            seq=next(self._seq),
            callback=callback,
            label=label,
        )
        heapq.heappush(self._heap, transition)
        logger.debug(f"scheduled {label or 'transition'} due={transition.due:.3f}")
        return transition

    def poll(self, now: Optional[float] = None) -> int:
        """
        Run every transition due at `now`, earliest first.

        Transitions scheduled by a callback run in the same poll if they
        are already due.

        Returns:
            Number of callbacks run
        """
        if now is None:
            now = self.clock()
        ran = 0
        while self._heap and self._heap[0].due <= now:
            transition = heapq.heappop(self._heap)
            if transition.cancelled:
                continue
            transition.callback()
            ran += 1
        return ran

    def flush(self) -> int:
        """Run all pending transitions regardless of their due time."""
        ran = 0
        while self._heap:
            transition = heapq.heappop(self._heap)
            if transition.cancelled:
                continue
            transition.callback()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        for transition in self._heap:
            transition.cancel()
        self._heap.clear()


__all__ = ["DeferredTransition", "DeferredScheduler"]
