"""Unit tests for the aggregation logic."""

from __future__ import annotations

from datetime import datetime
from operator import attrgetter

import pytest

from models.records import Measurement
from services.aggregator import Aggregator, least_active, load_ratios, most_active


def _measurement(gateway_code: str, sensor_code: str, value: float = 1.0) -> Measurement:
    """Helper to build deterministic measurements."""

    return Measurement(
        network_code="NET_01",
        gateway_code=gateway_code,
        sensor_code=sensor_code,
        value=value,
        timestamp=datetime(2024, 1, 1),
    )


def test_aggregate_empty_iterable_returns_default_summary() -> None:
    aggregator = Aggregator()

    summary = aggregator.aggregate([], key=attrgetter("sensor_code"))

    assert summary.total == 0
    assert summary.per_key_count == {}
    assert summary.most_active == []
    assert summary.least_active == []
    assert summary.load_ratio == {}


def test_aggregate_counts_and_ranks_by_key() -> None:
    aggregator = Aggregator()
    measurements = [
        _measurement("GW_0001", "S_000001"),
        _measurement("GW_0001", "S_000002"),
        _measurement("GW_0001", "S_000001"),
        _measurement("GW_0002", "S_000003"),
    ]

    summary = aggregator.aggregate(measurements, key=attrgetter("sensor_code"))

    assert summary.total == 4
    assert summary.per_key_count == {"S_000001": 2, "S_000002": 1, "S_000003": 1}
    assert summary.most_active == ["S_000001"]
    assert summary.least_active == ["S_000002", "S_000003"]
    assert summary.load_ratio == {"S_000001": 0.5, "S_000002": 0.25, "S_000003": 0.25}


def test_rankings_keep_every_tie() -> None:
    counts = {"b": 3, "a": 3, "c": 1}

    assert most_active(counts) == ["a", "b"]
    assert least_active(counts) == ["c"]
    assert most_active({}) == []
    assert least_active({}) == []


def test_load_ratios_sum_to_one() -> None:
    counts = {"a": 7, "b": 11, "c": 13}

    ratios = load_ratios(counts)

    assert sum(ratios.values()) == pytest.approx(1.0)


def test_load_ratios_without_total_are_empty() -> None:
    assert load_ratios({}) == {}
    assert load_ratios({"a": 2}, total=0) == {}
