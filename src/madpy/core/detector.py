"""Windowed change point detection over a stream of samples."""

import logging
import threading

from madpy.core import changepoint
from madpy.core.models import ChangePoint, Sample
from madpy.core.ports import ChangePointHistoryPort, DetectFn, SampleSourcePort
from madpy.core.window import MIN_SAMPLE_COUNT, trim_start

logger = logging.getLogger(__name__)


class WindowDetector:
    """Consumes samples, detects change points and trims the window.

    The detector alternates between filling the window from the sample
    source until it holds at least min_samples entries, and running one
    detection pass over the whole window. After each pass the window is cut
    according to trim_start, so it never empties and never reorders.

    Args:
        source: Where samples are consumed from, in arrival order.
        detect: Change point function, called as detect(values, sensitivity).
        min_samples: Window size at which detection starts.
        sensitivity: Passed through to detect.
        history: Optional sink for every detected change point.
    """

    def __init__(
        self,
        source: SampleSourcePort,
        detect: DetectFn = changepoint.detect,
        *,
        min_samples: int = MIN_SAMPLE_COUNT,
        sensitivity: int = 1,
        history: ChangePointHistoryPort | None = None,
    ) -> None:
        if min_samples < 1:
            raise ValueError(f"min_samples must be positive, got {min_samples}")
        self._source = source
        self._detect = detect
        self._min_samples = min_samples
        self._sensitivity = sensitivity
        self._history = history
        self._window: list[Sample] = []

    @property
    def window(self) -> tuple[Sample, ...]:
        """Snapshot of the retained samples, oldest first."""
        return tuple(self._window)

    @property
    def filled(self) -> bool:
        """True when the window is large enough for a detection pass."""
        return len(self._window) >= self._min_samples

    def add(self, sample: Sample) -> None:
        """Append a sample to the window."""
        self._window.append(sample)

    def fill(self) -> None:
        """Pop from the source until the window is filled.

        Blocks while the source is empty. Whatever the source raises when it
        is closed propagates to the caller.
        """
        while not self.filled:
            self.add(self._source.pop())

    def step(self) -> list[ChangePoint]:
        """Run one detection pass over the window and trim it.

        Returns:
            Change points found in this pass, in window order.
        """
        values = [sample.value for sample in self._window]
        timestamps = [sample.time for sample in self._window]
        indices = self._detect(values, self._sensitivity)

        found: list[ChangePoint] = []
        for index in indices:
            change_point = ChangePoint(index=index, sample=self._window[index])
            logger.info(
                "Change point %s detected at %s",
                change_point.sample.value,
                timestamps[index].isoformat(),
                extra={"index": index},
            )
            if self._history is not None:
                self._history.record(change_point)
            found.append(change_point)

        start = trim_start(len(self._window), indices)
        self._window = self._window[start:]
        return found

    def run(self, stop: threading.Event) -> None:
        """Fill and detect until stop is set.

        The stop event is polled once per outer iteration; a wait on an empty
        source ends only when a sample arrives or the source is closed.
        """
        while not stop.is_set():
            self.fill()
            if stop.is_set():
                return
            self.step()
