"""Interval-bucketed histograms over values, durations and timestamps.

All three flavours share one partitioning routine. Bucket edges are computed
with the ``-``, ``+``, ``*`` and ``/`` operators that ``float``,
``timedelta`` and ``datetime`` (paired with ``timedelta``) already support, so
the boundary logic exists exactly once.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Mapping
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from reports.errors import ValidationError
from reports.ranges import Range

DEFAULT_BUCKET_COUNT = 20
DEFAULT_HOURLY_LIMIT = timedelta(hours=48)

T = TypeVar("T")

Window = Tuple[Optional[T], Optional[T]]


class Granularity(str, Enum):
    """Calendar unit used to cut timestamp histograms."""

    hour = "hour"
    day = "day"

    @property
    def step(self) -> timedelta:
        return timedelta(hours=1) if self is Granularity.hour else timedelta(days=1)

    def truncate(self, moment: datetime) -> datetime:
        truncated = moment.replace(minute=0, second=0, microsecond=0)
        if self is Granularity.day:
            truncated = truncated.replace(hour=0)
        return truncated


class Histogram(Mapping):
    """Read-only mapping of ``Range`` to count, iterated by ascending start."""

    def __init__(self, buckets: Iterable[Tuple[Range[T], int]] = ()) -> None:
        self._counts: Dict[Range[T], int] = dict(
            sorted(buckets, key=lambda item: item[0])
        )

    def __getitem__(self, key: Range[T]) -> int:
        return self._counts[key]

    def __iter__(self) -> Iterator[Range[T]]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def __repr__(self) -> str:
        body = ", ".join(f"{bucket}: {count}" for bucket, count in self._counts.items())
        return f"Histogram({{{body}}})"


def select_granularity(
    start: datetime,
    end: datetime,
    hourly_limit: timedelta = DEFAULT_HOURLY_LIMIT,
) -> Granularity:
    """Hour buckets when the window spans at most ``hourly_limit`` whole hours."""
    hour = Granularity.hour.step
    if (end - start) // hour <= hourly_limit // hour:
        return Granularity.hour
    return Granularity.day


def build_histogram(
    samples: Iterable[T],
    window: Optional[Window] = None,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> Histogram:
    """Split the effective span into ``bucket_count`` buckets of equal width.

    Edges that round to the same value (a tiny span at a large float
    magnitude) are collapsed, so fewer than ``bucket_count`` buckets may come
    back. Buckets never have zero width.
    """
    if bucket_count < 1:
        raise ValidationError("Histogram bucket count must be positive.")

    observed = list(samples)
    if not observed:
        return Histogram()

    start, end = _effective_window(observed, window)
    if start == end:
        edges = [start, end]
    else:
        width = (end - start) / bucket_count  # type: ignore[operator]
        edges = [start + width * index for index in range(bucket_count)]  # type: ignore[operator]
        edges.append(end)
        edges = list(dict.fromkeys(edges))
    return _count(observed, _partition(edges))


def build_calendar_histogram(
    samples: Iterable[datetime],
    window: Optional[Window] = None,
    hourly_limit: timedelta = DEFAULT_HOURLY_LIMIT,
) -> Histogram:
    """Bucket timestamps on hour or day boundaries.

    The first bucket starts at the effective start, every following bucket
    starts on a truncated boundary and the last one ends at the effective end.
    """
    observed = list(samples)
    if not observed:
        return Histogram()

    start, end = _effective_window(observed, window)
    edges = [start]
    if start == end:
        edges.append(end)
    else:
        granularity = select_granularity(start, end, hourly_limit)
        while edges[-1] < end:
            floor = granularity.truncate(edges[-1])
            # Stepping past the last unit before ``end`` could overflow
            # ``datetime.max``.
            if end - floor <= granularity.step:
                edges.append(end)
            else:
                edges.append(floor + granularity.step)
    return _count(observed, _partition(edges))


def _effective_window(observed: Sequence[T], window: Optional[Window]) -> Tuple[T, T]:
    lower, upper = window if window is not None else (None, None)
    start = lower if lower is not None else min(observed)  # type: ignore[type-var]
    end = upper if upper is not None else max(observed)  # type: ignore[type-var]
    if end < start:  # type: ignore[operator]
        raise ValidationError(
            "Histogram window end must not precede its start.",
            details=f"start={start!r} end={end!r}",
        )
    return start, end


def _partition(edges: Sequence[T]) -> List[Range[T]]:
    last_index = len(edges) - 2
    return [
        Range(edges[index], edges[index + 1], last=index == last_index)
        for index in range(len(edges) - 1)
    ]


def _count(samples: Iterable[T], buckets: Sequence[Range[T]]) -> Histogram:
    counts = [0] * len(buckets)
    starts = [bucket.start for bucket in buckets]
    for sample in samples:
        # Buckets are contiguous, so only the last one starting at or before
        # the sample can contain it.
        index = bisect_right(starts, sample) - 1
        if index >= 0 and buckets[index].contains(sample):
            counts[index] += 1
    return Histogram(zip(buckets, counts))
