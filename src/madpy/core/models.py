"""Core domain models for sampled time series data."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class Sample:
    """A single scraped value of the target series.

    Attributes:
        timestamp: Unix timestamp in seconds, taken when the value was found.
        value: The sample value.
    """

    timestamp: float
    value: float

    @property
    def time(self) -> datetime:
        """Timestamp as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC)


@dataclass(frozen=True)
class ChangePoint:
    """A detected shift in the distribution of sample values.

    Attributes:
        index: Position of the first sample of the new segment, relative to
            the window that was analysed.
        sample: The sample at that position.
    """

    index: int
    sample: Sample
