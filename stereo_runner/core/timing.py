# stereo_runner/core/timing.py
# Tracking-time statistics
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
import numpy as np


@dataclass(frozen=True)
class TimingStats:
    count: int
    median_s: float
    mean_s: float
    total_s: float
    min_s: float
    max_s: float


def median_upper(samples: Sequence[float]) -> float:
    """
    Element at index n // 2 of the sorted samples.
    Odd n: the true median. Even n: the upper of the two middle values
    ([1, 2, 3, 4] -> 3), no averaging.
    """
    if len(samples) == 0:
        raise ValueError("median of an empty sample set")
    arr = np.sort(np.asarray(samples, dtype=np.float64))
    return float(arr[len(arr) // 2])


def summarize_latencies(samples: Sequence[float]) -> TimingStats:
    if len(samples) == 0:
        raise ValueError("no latency samples to summarize")
    arr = np.asarray(samples, dtype=np.float64)
    return TimingStats(
        count=int(arr.size),
        median_s=median_upper(arr),
        mean_s=float(arr.mean()),
        total_s=float(arr.sum()),
        min_s=float(arr.min()),
        max_s=float(arr.max()),
    )
