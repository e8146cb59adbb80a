"""Bounded blocking FIFO between the scraper and the detector."""

import threading
import time
from collections import deque
from collections.abc import Callable

from madpy.core.models import Sample
from madpy.core.window import MIN_SAMPLE_COUNT


class QueueClosed(Exception):
    """Raised by push and pop once the queue has been closed."""


class QueueTimeout(Exception):
    """Raised when a bounded push or pop wait expires."""


# @tra: Adapter.SampleQueue.ImplementsSampleSourcePort
# @tra: Adapter.SampleQueue.ImplementsSampleSinkPort
class SampleQueue:
    """Thread-safe bounded FIFO of samples with an explicit closed state.

    Push blocks while the queue is full and pop blocks while it is empty.
    Closing the queue wakes every waiter; from then on push and pop raise
    QueueClosed. Samples still buffered at close time are discarded.

    Args:
        capacity: Maximum number of buffered samples.
    """

    def __init__(self, capacity: int = MIN_SAMPLE_COUNT) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._buffer: deque[Sample] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def capacity(self) -> int:
        """Maximum number of buffered samples."""
        return self._capacity

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._buffer)

    def push(self, sample: Sample, timeout: float | None = None) -> None:
        """Append a sample, waiting for room while the queue is full.

        Raises:
            QueueClosed: If the queue is or becomes closed.
            QueueTimeout: If no room became available within timeout seconds.
        """
        with self._cond:
            self._wait(lambda: len(self._buffer) < self._capacity, timeout)
            self._buffer.append(sample)
            self._cond.notify_all()

    def pop(self, timeout: float | None = None) -> Sample:
        """Remove and return the oldest sample, waiting while empty.

        Raises:
            QueueClosed: If the queue is or becomes closed.
            QueueTimeout: If nothing arrived within timeout seconds.
        """
        with self._cond:
            self._wait(lambda: len(self._buffer) > 0, timeout)
            sample = self._buffer.popleft()
            self._cond.notify_all()
            return sample

    def close(self) -> None:
        """Close the queue and wake all blocked producers and consumers."""
        with self._cond:
            self._closed = True
            self._buffer.clear()
            self._cond.notify_all()

    def _wait(self, ready: Callable[[], bool], timeout: float | None) -> None:
        """Wait under the lock until ready() holds or the queue closes."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if self._closed:
                raise QueueClosed("sample queue is closed")
            if ready():
                return
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                raise QueueTimeout("timed out waiting on sample queue")
            self._cond.wait(remaining)
