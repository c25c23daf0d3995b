"""Read-only contract shared by the network, gateway and sensor reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from models.records import Measurement
from reports.histogram import Histogram
from reports.window import ReportWindow


@dataclass(frozen=True)
class Report:
    code: str
    start_date: Optional[str]
    end_date: Optional[str]
    number_of_measurements: int
    histogram: Histogram


def select_measurements(
    measurements: Iterable[Measurement],
    key: Callable[[Measurement], str],
    code: str,
    window: ReportWindow,
) -> List[Measurement]:
    """Keep measurements owned by ``code`` whose timestamp falls inside ``window``."""
    return [
        measurement
        for measurement in measurements
        if key(measurement) == code and window.contains(measurement.timestamp)
    ]
