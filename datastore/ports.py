"""Read interfaces the report operations depend on."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, TypeVar

from models.records import Measurement

EntityT_co = TypeVar("EntityT_co", covariant=True)


class MeasurementStore(Protocol):
    """Source of already-collected measurements."""

    def read_all(self) -> Sequence[Measurement]:
        """Return an immutable snapshot of every stored measurement."""
        ...

    def read_by_sensor_and_range(
        self,
        sensor_code: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Measurement]:
        """Return a sensor's measurements with ``start <= timestamp <= end``."""
        ...


class EntityStore(Protocol[EntityT_co]):
    """Lookup of networks, gateways or sensors by code."""

    def exists(self, code: str) -> bool:
        ...

    def get_item(self, code: str) -> Optional[EntityT_co]:
        ...
