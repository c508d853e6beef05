#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing,
#  software distributed under the License is distributed on an
#  "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
#  KIND, either express or implied.  See the License for the
#  specific language governing permissions and limitations
#  under the License.

"""
Latency Statistics

Pure functions over a sequence of latency samples (milliseconds). Empty input
is "no data" and yields 0 rather than an error; callers decide how to present
groups without samples.

Percentiles use linear interpolation between closest ranks over a sorted copy
of the input, so the caller's sequence is never reordered.
"""

import math
from dataclasses import asdict, dataclass
from typing import Sequence


@dataclass(frozen=True)
class Stats:
    """Summary statistics for one group of latency samples.

    Attributes:
        count: Number of samples
        min: Smallest sample
        max: Largest sample
        mean: Arithmetic mean
        stddev: Sample standard deviation (N-1 denominator)
        p50: Median
        p95: 95th percentile
        p99: 99th percentile
    """

    count: int = 0
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    stddev: float = 0.0
    p50: float = 0.0
    p95: float = 0.0
    p99: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert stats to a dictionary for JSON serialization."""
        return asdict(self)


def _check_percentile(p: float) -> None:
    if not 0 <= p <= 100:
        raise ValueError(f"Percentile must be between 0 and 100, got {p}")


def _interpolate(sorted_values: Sequence[float], p: float) -> float:
    """Percentile over an already sorted, non-empty sequence."""
    if len(sorted_values) == 1:
        return sorted_values[0]

    index = (p / 100) * (len(sorted_values) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)

    if lower == upper:
        return sorted_values[lower]

    fraction = index - lower
    return sorted_values[lower] + fraction * (sorted_values[upper] - sorted_values[lower])


def percentile(values: Sequence[float], p: float) -> float:
    """Return the linearly interpolated p-th percentile of values.

    Args:
        values: Latency samples, in any order
        p: Percentile between 0 and 100

    Returns:
        The percentile value, or 0 for an empty sequence

    Raises:
        ValueError: If p is outside 0-100
    """
    _check_percentile(p)
    if not values:
        return 0.0
    return _interpolate(sorted(values), p)


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def stddev(values: Sequence[float]) -> float:
    """Sample standard deviation; 0 for fewer than two samples."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    squared_diffs = math.fsum((v - avg) ** 2 for v in values)
    return math.sqrt(squared_diffs / (len(values) - 1))


def minimum(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return min(values)


def maximum(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return max(values)


def compute_stats(values: Sequence[float]) -> Stats:
    """Compute all summary statistics for a group of samples.

    The input is sorted once and min, max and every percentile are read
    from that single sorted copy.

    Example:
        >>> compute_stats([10, 20, 30, 40, 50]).p50
        30
    """
    if not values:
        return Stats()

    ordered = sorted(values)
    return Stats(
        count=len(ordered),
        min=ordered[0],
        max=ordered[-1],
        mean=mean(ordered),
        stddev=stddev(ordered),
        p50=_interpolate(ordered, 50),
        p95=_interpolate(ordered, 95),
        p99=_interpolate(ordered, 99),
    )
