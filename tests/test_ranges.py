"""Unit tests for histogram bucket ranges."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from reports.errors import ValidationError
from reports.ranges import Range


def test_non_last_range_is_half_open() -> None:
    bucket = Range(1.0, 2.0)

    assert bucket.contains(1.0)
    assert bucket.contains(1.5)
    assert not bucket.contains(2.0)
    assert not bucket.contains(0.999)


def test_last_range_includes_end() -> None:
    bucket = Range(1.0, 2.0, last=True)

    assert bucket.contains(1.0)
    assert bucket.contains(2.0)
    assert not bucket.contains(2.0001)


def test_same_rule_applies_to_durations_and_timestamps() -> None:
    durations = Range(timedelta(minutes=1), timedelta(minutes=5))
    moments = Range(datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11), last=True)

    assert durations.contains(timedelta(minutes=1))
    assert not durations.contains(timedelta(minutes=5))
    assert moments.contains(datetime(2024, 1, 1, 11))
    assert not moments.contains(datetime(2024, 1, 1, 9, 59, 59))


def test_degenerate_last_range_contains_its_single_point() -> None:
    bucket = Range(5.0, 5.0, last=True)

    assert bucket.contains(5.0)
    assert not bucket.contains(5.1)


def test_end_before_start_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Range(3.0, 2.0)


def test_ranges_are_hashable_and_ordered_by_start() -> None:
    first = Range(0.0, 1.0)
    second = Range(1.0, 2.0, last=True)

    counts = {second: 2, first: 1}

    assert counts[Range(0.0, 1.0)] == 1
    assert sorted(counts) == [first, second]
    assert str(first) == "[0.0, 1.0)"
    assert str(second) == "[1.0, 2.0]"
