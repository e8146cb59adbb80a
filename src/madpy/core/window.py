"""Retention policy for the detection window."""

from collections.abc import Sequence

# Minimum number of samples before change points are estimated.
MIN_SAMPLE_COUNT = 1 << 5


def trim_start(length: int, indices: Sequence[int]) -> int:
    """Return the index the window should be cut from after a detection pass.

    Without change points the back half is kept, starting at
    `(length - 1) // 2`. Otherwise the window restarts at the most recent
    change point, discarding everything before it.

    Args:
        length: Current window length, at least 1.
        indices: Ascending change point indices returned by the detector.

    Returns:
        Start index of the retained slice; always less than length.
    """
    if indices:
        return indices[-1]
    return (length - 1) // 2
