"""Domain records shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Measurement:
    """A single value reported by a sensor, tagged with its owning entities."""

    network_code: str
    gateway_code: str
    sensor_code: str
    value: float
    timestamp: datetime
