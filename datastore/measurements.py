from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError as PayloadError

from models.records import Measurement
from settings import get_settings

_PAYLOAD = TypeAdapter(List[Measurement])


class MeasurementTable:
    """Append-only measurement log with optional JSON persistence."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: List[Measurement] = []
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, measurements: Iterable[Measurement]) -> int:
        batch = list(measurements)
        with self._lock:
            self._items.extend(batch)
            self._persist()
        return len(batch)

    def read_all(self) -> Tuple[Measurement, ...]:
        with self._lock:
            return tuple(self._items)

    def read_by_sensor_and_range(
        self,
        sensor_code: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Tuple[Measurement, ...]:
        with self._lock:
            return tuple(
                item
                for item in self._items
                if item.sensor_code == sensor_code
                and (start is None or item.timestamp >= start)
                and (end is None or item.timestamp <= end)
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        self.persistence_path.write_bytes(_PAYLOAD.dump_json(self._items, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_bytes() or b"[]"
            items = _PAYLOAD.validate_json(raw)
        except (OSError, PayloadError):
            items = []

        self._items.extend(items)


@lru_cache
def build_default_measurement_table(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MeasurementTable:
    settings = get_settings()
    table_path = settings.measurement_store_path if path is None else path
    persistence = Path(table_path) if table_path else None
    return MeasurementTable(name=name or "measurements", persistence_path=persistence)
