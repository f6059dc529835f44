"""Sort-based median / MAD statistics for a single window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

DEFAULT_CCONST = 1.4826


@dataclass(frozen=True)
class WindowStatistics:
    median: float
    mad: float
    cutoff: float


def _median_of_sorted(arr: np.ndarray) -> float:
    size = arr.size
    if size % 2:
        return float(arr[size // 2])
    return float((arr[size // 2] + arr[size // 2 - 1]) / 2)


def window_median(values: Sequence[float] | np.ndarray) -> float:
    """Median of ``values``; even-sized windows average the two central elements."""

    arr = np.sort(np.asarray(values, dtype=float))
    if arr.size == 0:
        raise ValueError("median of an empty window is undefined")
    return _median_of_sorted(arr)


def median_absolute_deviation(
    values: Sequence[float] | np.ndarray,
    cconst: float = DEFAULT_CCONST,
) -> Tuple[float, float]:
    """Return ``(median, cconst * MAD)`` for ``values``.

    Both the values and their absolute deviations are fully sorted, so the
    result matches the textbook definition exactly, including the averaging
    rule for even window sizes.
    """

    arr = np.sort(np.asarray(values, dtype=float))
    if arr.size == 0:
        raise ValueError("MAD of an empty window is undefined")
    median = _median_of_sorted(arr)
    deviations = np.sort(np.abs(arr - median))
    raw_mad = _median_of_sorted(deviations)
    return median, float(cconst * raw_mad)


def cutoff_score(value: float, median: float, scaled_mad: float) -> float:
    """Absolute deviation of ``value`` from ``median`` in units of ``scaled_mad``.

    A zero ``scaled_mad`` follows IEEE-754 division: ``inf`` when the value
    differs from the median and ``nan`` when it equals it.
    """

    with np.errstate(divide="ignore", invalid="ignore"):
        score = np.abs(np.float64(value) - np.float64(median)) / np.float64(scaled_mad)
    return float(score)


def window_statistics(values: Sequence[float] | np.ndarray, cconst: float = DEFAULT_CCONST) -> WindowStatistics:
    """Compute median, scaled MAD and the cutoff score of the newest (last) value."""

    arr = np.asarray(values, dtype=float)
    median, mad = median_absolute_deviation(arr, cconst)
    return WindowStatistics(median=median, mad=mad, cutoff=cutoff_score(float(arr[-1]), median, mad))
