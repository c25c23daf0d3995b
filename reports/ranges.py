"""Histogram bucket ranges over an ordered domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar

from reports.errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Range(Generic[T]):
    """A single histogram bucket.

    Every bucket is left-closed. Only the last bucket of a partition is also
    right-closed, so the largest observed value always lands somewhere:

    * ``last=False``: ``start <= value < end``
    * ``last=True``: ``start <= value <= end``

    The same rule applies to numeric values, durations and timestamps.
    """

    start: T
    end: T
    last: bool = False

    def __post_init__(self) -> None:
        if self.end < self.start:  # type: ignore[operator]
            raise ValidationError(
                "Range end must not precede its start.",
                details=f"start={self.start!r} end={self.end!r}",
            )

    def contains(self, value: T) -> bool:
        if value < self.start:  # type: ignore[operator]
            return False
        if self.last:
            return value <= self.end  # type: ignore[operator]
        return value < self.end  # type: ignore[operator]

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return (self.start, self.end, self.last) < (other.start, other.end, other.last)

    def __str__(self) -> str:
        closing = "]" if self.last else ")"
        return f"[{self.start}, {self.end}{closing}"


ValueRange = Range[float]
DurationRange = Range[timedelta]
TimeRange = Range[datetime]
