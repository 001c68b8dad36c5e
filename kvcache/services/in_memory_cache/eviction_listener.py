"""Eviction notification helpers."""

import queue
from dataclasses import dataclass
from typing import Any, Iterator, Optional


@dataclass(frozen=True)
class EvictionEvent:
    """An entry removed from a cache to make room for a new one."""

    key: Any
    value: Any


class QueueEvictionListener:
    """
    Eviction listener that hands events to a queue instead of handling them inline.

    A plain callable passed as ``eviction_listener`` runs synchronously while
    the cache lock is held, so it sees evictions in exact order but stalls
    every other cache caller for as long as it runs. This listener only does
    a non-blocking enqueue under the lock; consumers drain the queue on their
    own thread. The cost is that observation lags the eviction, and with a
    bounded queue events are dropped (and counted) once it is full.
    """

    def __init__(self, maxsize: int = 0):
        """
        Args:
            maxsize: Queue bound; 0 means unbounded
        """
        self._queue: "queue.Queue[EvictionEvent]" = queue.Queue(maxsize=maxsize)
        self.dropped = 0

    def __call__(self, key: Any, value: Any) -> None:
        try:
            self._queue.put_nowait(EvictionEvent(key, value))
        except queue.Full:
            self.dropped += 1

    def get(self, timeout: Optional[float] = None) -> Optional[EvictionEvent]:
        """
        Wait for the next eviction event.

        Args:
            timeout: Seconds to wait; None waits forever

        Returns:
            The next event, or None if the timeout expired
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> Iterator[EvictionEvent]:
        """Yield all currently queued events without blocking."""
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return

    def pending(self) -> int:
        """Approximate number of undelivered events."""
        return self._queue.qsize()
