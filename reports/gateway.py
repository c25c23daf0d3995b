"""Gateway report: sensor activity, outlier sensors and inter-arrival times."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import timedelta
from itertools import pairwise
from operator import attrgetter
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.entities import (
    BATTERY_CHARGE_PERCENTAGE_CODE,
    EXPECTED_MEAN_CODE,
    EXPECTED_STD_DEV_CODE,
    Gateway,
)
from models.records import Measurement
from reports.base import Report, select_measurements
from reports.histogram import DEFAULT_BUCKET_COUNT, build_histogram
from reports.statistics import DEFAULT_OUTLIER_SIGMA, is_outlier
from reports.window import ReportWindow
from services.aggregator import Aggregator


def inter_arrival_times(measurements: Iterable[Measurement]) -> List[timedelta]:
    """Gaps between consecutive measurements once sorted by timestamp."""
    timestamps = sorted(measurement.timestamp for measurement in measurements)
    return [later - earlier for earlier, later in pairwise(timestamps)]


def outlier_sensors(
    measurements: Sequence[Measurement],
    gateway: Optional[Gateway],
    sigma: float = DEFAULT_OUTLIER_SIGMA,
) -> List[str]:
    """Sensors whose mean value strays from the gateway's expected mean.

    The expectation comes from the gateway's ``EXPECTED_MEAN`` and
    ``EXPECTED_STD_DEV`` parameters; without both nothing is flagged.
    An expected deviation of 0 also flags nothing, even for sensors whose
    mean differs from the expected one.
    """
    if gateway is None:
        return []
    expected_mean = gateway.parameter(EXPECTED_MEAN_CODE)
    expected_stddev = gateway.parameter(EXPECTED_STD_DEV_CODE)
    if expected_mean is None or expected_stddev is None:
        return []

    values_by_sensor: Dict[str, List[float]] = defaultdict(list)
    for measurement in measurements:
        values_by_sensor[measurement.sensor_code].append(measurement.value)

    return sorted(
        sensor_code
        for sensor_code, values in values_by_sensor.items()
        if is_outlier(sum(values) / len(values), expected_mean, expected_stddev, sigma)
    )


@dataclass(frozen=True)
class GatewayReport(Report):
    most_active_sensors: Tuple[str, ...]
    least_active_sensors: Tuple[str, ...]
    sensors_load_ratio: Mapping[str, float]
    outlier_sensors: Tuple[str, ...]
    battery_charge_percentage: Optional[float]

    @classmethod
    def build(
        cls,
        code: str,
        window: ReportWindow,
        measurements: Iterable[Measurement],
        gateway: Optional[Gateway] = None,
        aggregator: Optional[Aggregator] = None,
        bucket_count: int = DEFAULT_BUCKET_COUNT,
        sigma: float = DEFAULT_OUTLIER_SIGMA,
    ) -> "GatewayReport":
        selected = select_measurements(
            measurements, attrgetter("gateway_code"), code, window
        )
        activity = (aggregator or Aggregator()).aggregate(
            selected, key=attrgetter("sensor_code")
        )
        histogram = build_histogram(
            inter_arrival_times(selected), bucket_count=bucket_count
        )
        battery = (
            gateway.parameter(BATTERY_CHARGE_PERCENTAGE_CODE) if gateway is not None else None
        )
        return cls(
            code=code,
            start_date=window.start_date,
            end_date=window.end_date,
            number_of_measurements=len(selected),
            histogram=histogram,
            most_active_sensors=tuple(activity.most_active),
            least_active_sensors=tuple(activity.least_active),
            sensors_load_ratio=MappingProxyType(dict(activity.load_ratio)),
            outlier_sensors=tuple(outlier_sensors(selected, gateway, sigma)),
            battery_charge_percentage=battery,
        )
