"""Non-parametric change point detection (ED-PELT).

PELT search over an empirical-distribution segment cost, as described in
Haynes, Fearnhead and Eckley, "A computationally efficient nonparametric
approach for changepoint detection" (2017). The cost integral is
approximated with k quantiles and the penalty is the modified BIC.
"""

import math
from collections.abc import Callable, Sequence


def detect(values: Sequence[float], sensitivity: int = 1) -> list[int]:
    """Return indices where the distribution of values shifts.

    Args:
        values: Time-ordered sample values.
        sensitivity: Minimum segment length; 1 reports the most change points.

    Returns:
        Ascending indices of the first element of each new segment. Empty
        when the series is too short or homogeneous.

    Raises:
        ValueError: If sensitivity is less than 1.
    """
    if sensitivity < 1:
        raise ValueError(f"sensitivity must be positive, got {sensitivity}")
    n = len(values)
    if n <= 2 or n // 2 < sensitivity:
        return []

    penalty = 3 * math.log(n)
    # k may not exceed n (matters for n <= 8).
    k = min(n, math.ceil(4 * math.log(n)))
    partial_sums = _partial_sums(values, k)

    def cost(tau1: int, tau2: int) -> float:
        return _segment_cost(partial_sums, tau1, tau2, k, n)

    return _pelt(n, sensitivity, cost, penalty)


def _partial_sums(values: Sequence[float], k: int) -> list[list[int]]:
    """Prefix counts of values below (2) or equal to (1) each quantile."""
    n = len(values)
    ordered = sorted(values)
    sums: list[list[int]] = []
    for i in range(k):
        z = -1 + (2 * i + 1.0) / k
        p = 1.0 / (1 + (2 * n - 1) ** -z)
        threshold = ordered[math.trunc((n - 1) * p)]
        row = [0] * (n + 1)
        for tau in range(1, n + 1):
            row[tau] = row[tau - 1]
            value = values[tau - 1]
            if value < threshold:
                row[tau] += 2
            elif value == threshold:
                row[tau] += 1
        sums.append(row)
    return sums


def _segment_cost(
    partial_sums: list[list[int]], tau1: int, tau2: int, k: int, n: int
) -> float:
    width = tau2 - tau1
    total = 0.0
    for row in partial_sums:
        actual = row[tau2] - row[tau1]
        if actual != 0 and actual != width * 2:
            fit = actual * 0.5 / width
            total += width * (fit * math.log(fit) + (1 - fit) * math.log(1 - fit))
    c = -math.log(2 * n - 1)
    return 2.0 * c / k * total


def _pelt(
    n: int,
    min_segment: int,
    cost: Callable[[int, int], float],
    penalty: float,
) -> list[int]:
    best_cost = [0.0] * (n + 1)
    best_cost[0] = -penalty
    for tau in range(min_segment, 2 * min_segment):
        best_cost[tau] = cost(0, tau)

    previous_change = [0] * (n + 1)
    candidates = [0, min_segment]

    for tau in range(2 * min_segment, n + 1):
        costs = [best_cost[prev] + cost(prev, tau) + penalty for prev in candidates]
        best = min(range(len(costs)), key=costs.__getitem__)
        best_cost[tau] = costs[best]
        previous_change[tau] = candidates[best]

        # Prune candidates that can never be optimal again.
        threshold = best_cost[tau] + penalty
        candidates = [
            prev for prev, c in zip(candidates, costs, strict=True) if c < threshold
        ]
        candidates.append(tau - min_segment + 1)

    indices: list[int] = []
    index = previous_change[n]
    while index != 0:
        indices.append(index)
        index = previous_change[index]
    indices.reverse()
    return indices
