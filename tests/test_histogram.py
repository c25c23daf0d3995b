"""Unit tests for the histogram builder."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from reports.errors import ValidationError
from reports.histogram import (
    Granularity,
    Histogram,
    build_calendar_histogram,
    build_histogram,
    select_granularity,
)
from reports.ranges import Range


def _assert_contiguous(histogram: Histogram, start, end) -> None:
    buckets = list(histogram)
    assert buckets[0].start == start
    assert buckets[-1].end == end
    assert buckets[-1].last
    assert not any(bucket.last for bucket in buckets[:-1])
    for previous, following in zip(buckets, buckets[1:]):
        assert previous.end == following.start


def test_identical_values_produce_single_closed_bucket() -> None:
    histogram = build_histogram([5.0, 5.0, 5.0])

    assert dict(histogram) == {Range(5.0, 5.0, last=True): 3}


def test_empty_sample_produces_empty_histogram() -> None:
    assert len(build_histogram([])) == 0
    assert len(build_calendar_histogram([])) == 0


def test_buckets_cover_observed_span_without_gaps() -> None:
    samples = [float(value) for value in range(11)]

    histogram = build_histogram(samples)

    assert len(histogram) == 20
    _assert_contiguous(histogram, 0.0, 10.0)
    assert histogram.total == len(samples)


def test_maximum_lands_in_last_bucket() -> None:
    samples = [0.0, 0.3, 0.8, 1.0]

    histogram = build_histogram(samples, bucket_count=4)

    buckets = list(histogram)
    assert histogram[buckets[-1]] == 2
    assert buckets[-1].contains(1.0)
    assert histogram.total == 4


def test_explicit_window_sets_bucket_edges() -> None:
    histogram = build_histogram([2.0, 3.5], window=(0.0, 10.0), bucket_count=10)

    buckets = list(histogram)
    assert buckets[0] == Range(0.0, 1.0)
    assert histogram[buckets[2]] == 1
    assert histogram[buckets[3]] == 1
    _assert_contiguous(histogram, 0.0, 10.0)


def test_samples_outside_window_are_not_counted() -> None:
    histogram = build_histogram([1.0, 5.0, 20.0], window=(0.0, 10.0))

    assert histogram.total == 2


def test_inverted_window_is_rejected() -> None:
    with pytest.raises(ValidationError):
        build_histogram([1.0, 2.0], window=(5.0, 1.0))


def test_bucket_count_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        build_histogram([1.0, 2.0], bucket_count=0)


def test_iteration_follows_bucket_start() -> None:
    histogram = Histogram([(Range(1.0, 2.0, last=True), 1), (Range(0.0, 1.0), 2)])

    assert [bucket.start for bucket in histogram] == [0.0, 1.0]
    assert histogram[Range(0.0, 1.0)] == 2


def test_duration_histogram_uses_equal_width() -> None:
    samples = [timedelta(minutes=1), timedelta(minutes=3), timedelta(minutes=21)]

    histogram = build_histogram(samples)

    buckets = list(histogram)
    assert buckets[0] == Range(timedelta(minutes=1), timedelta(minutes=2))
    assert histogram[buckets[0]] == 1
    assert histogram[buckets[2]] == 1
    assert histogram[buckets[-1]] == 1
    _assert_contiguous(histogram, timedelta(minutes=1), timedelta(minutes=21))


def test_calendar_histogram_uses_hour_boundaries_for_short_windows() -> None:
    start = datetime(2024, 1, 1, 10, 30)
    end = datetime(2024, 1, 1, 13, 15)
    samples = [start, datetime(2024, 1, 1, 11, 0), end]

    histogram = build_calendar_histogram(samples)

    assert list(histogram) == [
        Range(start, datetime(2024, 1, 1, 11)),
        Range(datetime(2024, 1, 1, 11), datetime(2024, 1, 1, 12)),
        Range(datetime(2024, 1, 1, 12), datetime(2024, 1, 1, 13)),
        Range(datetime(2024, 1, 1, 13), end, last=True),
    ]
    assert list(histogram.values()) == [1, 1, 0, 1]


def test_calendar_histogram_uses_day_boundaries_for_long_windows() -> None:
    start = datetime(2024, 1, 1, 6)
    end = datetime(2024, 1, 4, 12)

    histogram = build_calendar_histogram([datetime(2024, 1, 2, 8)], window=(start, end))

    assert [bucket.start for bucket in histogram] == [
        start,
        datetime(2024, 1, 2),
        datetime(2024, 1, 3),
        datetime(2024, 1, 4),
    ]
    _assert_contiguous(histogram, start, end)
    assert list(histogram.values()) == [0, 1, 0, 0]


def test_calendar_histogram_single_timestamp() -> None:
    moment = datetime(2024, 1, 1, 9, 15)

    histogram = build_calendar_histogram([moment, moment])

    assert dict(histogram) == {Range(moment, moment, last=True): 2}


def test_granularity_cutoff_counts_whole_hours() -> None:
    start = datetime(2024, 1, 1)

    assert select_granularity(start, start + timedelta(hours=48, minutes=59)) is Granularity.hour
    assert select_granularity(start, start + timedelta(hours=49)) is Granularity.day
    assert (
        select_granularity(start, start + timedelta(hours=5), hourly_limit=timedelta(hours=4))
        is Granularity.day
    )


def test_truncate_to_day_and_hour() -> None:
    moment = datetime(2024, 3, 5, 17, 42, 9)

    assert Granularity.hour.truncate(moment) == datetime(2024, 3, 5, 17)
    assert Granularity.day.truncate(moment) == datetime(2024, 3, 5)


def test_calendar_histogram_day_buckets_up_to_last_representable_day() -> None:
    start = datetime(9999, 12, 1, 12, 0, 0)
    end = datetime(9999, 12, 31, 23, 59, 59)

    histogram = build_calendar_histogram([start, end], window=(start, end))

    buckets = list(histogram)
    _assert_contiguous(histogram, start, end)
    assert len(buckets) == 31
    assert buckets[-1].start == datetime(9999, 12, 31)
    assert histogram[buckets[-1]] == 1


def test_edges_rounding_together_collapse_into_wider_buckets() -> None:
    low, high = 1e16, 1e16 + 2.0

    histogram = build_histogram([low, high], bucket_count=20)

    assert len(histogram) < 20
    assert all(bucket.start < bucket.end for bucket in histogram)
    _assert_contiguous(histogram, low, high)
    assert histogram.total == 2
