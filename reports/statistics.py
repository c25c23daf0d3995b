"""Descriptive statistics and the sigma-based outlier rule."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

DEFAULT_OUTLIER_SIGMA = 2.0

ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class Summary:
    """Descriptive statistics for a numeric sample.

    ``mean``, ``variance`` and ``stddev`` are ``0.0`` for samples with fewer
    than two values. ``minimum`` and ``maximum`` are ``None`` for an empty
    sample.
    """

    count: int = 0
    mean: float = 0.0
    variance: float = 0.0
    stddev: float = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None


def summarize(values: Iterable[float]) -> Summary:
    sample = [float(value) for value in values]
    count = len(sample)
    if not count:
        return Summary()

    minimum = min(sample)
    maximum = max(sample)
    if count < 2:
        return Summary(count=count, minimum=minimum, maximum=maximum)

    mean = sum(sample) / count
    variance = sum((value - mean) ** 2 for value in sample) / (count - 1)
    return Summary(
        count=count,
        mean=mean,
        variance=variance,
        stddev=math.sqrt(variance),
        minimum=minimum,
        maximum=maximum,
    )


def is_outlier(
    value: float,
    mean: float,
    stddev: float,
    sigma: float = DEFAULT_OUTLIER_SIGMA,
) -> bool:
    """Return True when ``value`` sits at least ``sigma`` deviations from ``mean``.

    A zero spread never flags anything.
    """
    if stddev == 0:
        return False
    return abs(value - mean) >= sigma * stddev


def split_outliers(
    items: Sequence[ItemT],
    summary: Summary,
    key: Callable[[ItemT], float],
    sigma: float = DEFAULT_OUTLIER_SIGMA,
) -> Tuple[List[ItemT], List[ItemT]]:
    """Partition ``items`` into ``(outliers, non_outliers)`` keeping input order."""
    outliers: List[ItemT] = []
    regular: List[ItemT] = []
    for item in items:
        if is_outlier(key(item), summary.mean, summary.stddev, sigma):
            outliers.append(item)
        else:
            regular.append(item)
    return outliers, regular
