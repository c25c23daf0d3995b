"""Sensor report: descriptive statistics, outliers and a value histogram."""

from __future__ import annotations

from dataclasses import dataclass
from operator import attrgetter
from typing import Iterable, Optional, Tuple

from models.records import Measurement
from reports.base import Report, select_measurements
from reports.histogram import DEFAULT_BUCKET_COUNT, build_histogram
from reports.statistics import DEFAULT_OUTLIER_SIGMA, split_outliers, summarize
from reports.window import ReportWindow


@dataclass(frozen=True)
class SensorReport(Report):
    """Statistics for one sensor.

    ``mean``, ``variance`` and ``stddev`` cover every selected measurement.
    The minimum, maximum and histogram only cover non-outliers so a single
    spike cannot stretch the displayed range.
    """

    mean: float
    variance: float
    stddev: float
    minimum_measured_value: Optional[float]
    maximum_measured_value: Optional[float]
    outliers: Tuple[Measurement, ...]

    @classmethod
    def build(
        cls,
        code: str,
        window: ReportWindow,
        measurements: Iterable[Measurement],
        bucket_count: int = DEFAULT_BUCKET_COUNT,
        sigma: float = DEFAULT_OUTLIER_SIGMA,
    ) -> "SensorReport":
        selected = select_measurements(
            measurements, attrgetter("sensor_code"), code, window
        )
        summary = summarize(measurement.value for measurement in selected)
        outliers, regular = split_outliers(
            selected, summary, key=attrgetter("value"), sigma=sigma
        )
        regular_values = [measurement.value for measurement in regular]
        return cls(
            code=code,
            start_date=window.start_date,
            end_date=window.end_date,
            number_of_measurements=summary.count,
            histogram=build_histogram(regular_values, bucket_count=bucket_count),
            mean=summary.mean,
            variance=summary.variance,
            stddev=summary.stddev,
            minimum_measured_value=min(regular_values) if regular_values else None,
            maximum_measured_value=max(regular_values) if regular_values else None,
            outliers=tuple(outliers),
        )
