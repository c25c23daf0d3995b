from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel

from models.entities import Gateway, Network, Sensor
from settings import get_settings

EntityT = TypeVar("EntityT", bound=BaseModel)


class EntityTable(Generic[EntityT]):
    """In-memory entity table keyed by ``code`` with optional JSON persistence."""

    def __init__(
        self,
        name: str,
        model: Type[EntityT],
        persistence_path: Optional[Path] = None,
    ) -> None:
        self.name = name
        self.model = model
        self._items: Dict[str, EntityT] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, item: EntityT) -> None:
        with self._lock:
            self._items[item.code] = item.model_copy(deep=True)  # type: ignore[attr-defined]
            self._persist()

    def get_item(self, code: str) -> Optional[EntityT]:
        with self._lock:
            item = self._items.get(code)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def exists(self, code: str) -> bool:
        with self._lock:
            return code in self._items

    def scan(self) -> list[EntityT]:
        """Return deep copies of all stored entities."""

        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {code: item.model_dump(mode="json") for code, item in self._items.items()}
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for code, payload in data.items():
            self._items[code] = self.model.model_validate(payload)


@dataclass(frozen=True)
class EntityTables:
    networks: EntityTable[Network]
    gateways: EntityTable[Gateway]
    sensors: EntityTable[Sensor]


def build_entity_tables(root: Optional[Path] = None) -> EntityTables:
    def path_for(name: str) -> Optional[Path]:
        return root / f"{name}.json" if root else None

    return EntityTables(
        networks=EntityTable("networks", Network, path_for("networks")),
        gateways=EntityTable("gateways", Gateway, path_for("gateways")),
        sensors=EntityTable("sensors", Sensor, path_for("sensors")),
    )


@lru_cache
def build_default_entity_tables(root: Optional[str] = None) -> EntityTables:
    settings = get_settings()
    table_root = settings.entity_store_root if root is None else root
    return build_entity_tables(Path(table_root) if table_root else None)
