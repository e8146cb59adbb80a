"""In-memory storage adapters implementing core ports."""

from madpy.adapters.storage.ring_buffer import ChangePointHistory
from madpy.adapters.storage.sample_queue import (
    QueueClosed,
    QueueTimeout,
    SampleQueue,
)

__all__ = [
    "ChangePointHistory",
    "QueueClosed",
    "QueueTimeout",
    "SampleQueue",
]
