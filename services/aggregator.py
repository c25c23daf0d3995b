"""Activity aggregation over measurements grouped by an entity code."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional, TypeVar

from models.records import Measurement

K = TypeVar("K", bound=Hashable)
ItemT = TypeVar("ItemT")


@dataclass
class ActivitySummary:
    """Per-key counts and the rankings derived from them."""

    total: int = 0
    per_key_count: Dict[str, int] = field(default_factory=dict)
    most_active: List[str] = field(default_factory=list)
    least_active: List[str] = field(default_factory=list)
    load_ratio: Dict[str, float] = field(default_factory=dict)


def count_by(items: Iterable[ItemT], key: Callable[[ItemT], K]) -> Dict[K, int]:
    counts: Dict[K, int] = {}
    for item in items:
        group = key(item)
        counts[group] = counts.get(group, 0) + 1
    return counts


def most_active(counts: Mapping[K, int]) -> List[K]:
    """Keys attaining the highest count; ties are all kept."""
    if not counts:
        return []
    peak = max(counts.values())
    return sorted(code for code, count in counts.items() if count == peak)


def least_active(counts: Mapping[K, int]) -> List[K]:
    """Keys attaining the lowest count; ties are all kept."""
    if not counts:
        return []
    floor = min(counts.values())
    return sorted(code for code, count in counts.items() if count == floor)


def load_ratios(counts: Mapping[K, int], total: Optional[int] = None) -> Dict[K, float]:
    """Share of ``total`` attributable to each key.

    Returns an empty mapping when there is nothing to divide by.
    """
    denominator = sum(counts.values()) if total is None else total
    if denominator <= 0:
        return {}
    return {code: count / denominator for code, count in counts.items()}


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self,
        measurements: Iterable[Measurement],
        key: Callable[[Measurement], str],
    ) -> ActivitySummary:
        per_key_count = count_by(measurements, key)
        total = sum(per_key_count.values())
        return ActivitySummary(
            total=total,
            per_key_count=per_key_count,
            most_active=most_active(per_key_count),
            least_active=least_active(per_key_count),
            load_ratio=load_ratios(per_key_count, total),
        )
