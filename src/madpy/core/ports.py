"""Port interfaces between the detector and its collaborators.

The core depends only on these protocols, not on the concrete queue,
history or change point implementations.
"""

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from madpy.core.models import ChangePoint, Sample


@runtime_checkable
class SampleSourcePort(Protocol):
    """Port for consuming samples in arrival order.

    Examples: SampleQueue.
    """

    def pop(self, timeout: float | None = None) -> Sample:
        """Remove and return the oldest sample, blocking while empty."""
        ...


@runtime_checkable
class SampleSinkPort(Protocol):
    """Port for handing samples to the consumer side."""

    def push(self, sample: Sample, timeout: float | None = None) -> None:
        """Append a sample, blocking while the buffer is full."""
        ...


@runtime_checkable
class ChangePointHistoryPort(Protocol):
    """Port for recording detected change points.

    Examples: ChangePointHistory.
    """

    def record(self, change_point: ChangePoint) -> None:
        """Record a detected change point."""
        ...

    def read(self) -> Iterable[ChangePoint]:
        """Return recorded change points, oldest first."""
        ...


class DetectFn(Protocol):
    """Signature of a change point function."""

    def __call__(self, values: Sequence[float], sensitivity: int) -> list[int]: ...
