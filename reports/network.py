"""Network report: gateway activity and a calendar-time histogram."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from operator import attrgetter
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from models.records import Measurement
from reports.base import Report, select_measurements
from reports.histogram import DEFAULT_HOURLY_LIMIT, build_calendar_histogram
from reports.window import ReportWindow
from services.aggregator import Aggregator


@dataclass(frozen=True)
class NetworkReport(Report):
    most_active_gateways: Tuple[str, ...]
    least_active_gateways: Tuple[str, ...]
    gateways_load_ratio: Mapping[str, float]

    @classmethod
    def build(
        cls,
        code: str,
        window: ReportWindow,
        measurements: Iterable[Measurement],
        aggregator: Optional[Aggregator] = None,
        hourly_limit: timedelta = DEFAULT_HOURLY_LIMIT,
    ) -> "NetworkReport":
        selected = select_measurements(
            measurements, attrgetter("network_code"), code, window
        )
        activity = (aggregator or Aggregator()).aggregate(
            selected, key=attrgetter("gateway_code")
        )
        histogram = build_calendar_histogram(
            (measurement.timestamp for measurement in selected),
            window=(window.start, window.end),
            hourly_limit=hourly_limit,
        )
        return cls(
            code=code,
            start_date=window.start_date,
            end_date=window.end_date,
            number_of_measurements=len(selected),
            histogram=histogram,
            most_active_gateways=tuple(activity.most_active),
            least_active_gateways=tuple(activity.least_active),
            gateways_load_ratio=MappingProxyType(dict(activity.load_ratio)),
        )
