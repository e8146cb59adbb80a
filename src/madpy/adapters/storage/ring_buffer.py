"""Ring buffer storage for detected change points.

Keeps the most recent findings in memory with a fixed upper bound, so a
long-running detector has predictable memory usage. Nothing survives a
restart.
"""

import threading
from collections import deque
from collections.abc import Iterable

from madpy.core.models import ChangePoint

DEFAULT_HISTORY_SIZE = 1024


class ChangePointHistory:
    """Ring buffer implementation of ChangePointHistoryPort.

    Stores change points in a fixed-size circular buffer. When the buffer
    is full, the oldest entry is evicted to make room for new entries.

    Args:
        max_size: Maximum number of change points to keep.
    """

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._buffer: deque[ChangePoint] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def record(self, change_point: ChangePoint) -> None:
        """Record a detected change point."""
        with self._lock:
            self._buffer.append(change_point)

    def read(self) -> Iterable[ChangePoint]:
        """Return recorded change points, oldest first."""
        with self._lock:
            return list(self._buffer)
