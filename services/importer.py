"""CSV ingestion of measurements into the measurement table."""

from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, TextIO

from datastore.measurements import MeasurementTable, build_default_measurement_table
from models.records import Measurement
from reports.errors import ValidationError
from reports.window import parse_date

logger = logging.getLogger(__name__)

_COLUMNS = {
    "date": "date",
    "networkcode": "network_code",
    "gatewaycode": "gateway_code",
    "sensorcode": "sensor_code",
    "value": "value",
}


@dataclass
class RowError:
    """A CSV row that was skipped, numbered from the header line."""

    row_number: int
    reason: str


@dataclass
class ImportSummary:
    imported: int = 0
    errors: List[RowError] = field(default_factory=list)


def _normalize_header(name: str) -> str:
    return name.strip().lower().replace("_", "")


class MeasurementImporter:
    """Parses ``date,networkCode,gatewayCode,sensorCode,value`` CSV files."""

    def __init__(self, table: MeasurementTable) -> None:
        self.table = table

    def import_bytes(self, contents: bytes, source: str = "upload") -> ImportSummary:
        if not contents:
            raise ValidationError("Uploaded file is empty.")
        try:
            text = contents.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError("Uploaded file is not valid UTF-8.", details=str(exc)) from exc
        return self.import_stream(io.StringIO(text), source=source)

    def import_stream(self, stream: TextIO, source: str = "upload") -> ImportSummary:
        reader = csv.DictReader(stream)
        if not reader.fieldnames:
            raise ValidationError("CSV file is missing a header row.")

        normalized = {_normalize_header(name): name for name in reader.fieldnames}
        missing = sorted(set(_COLUMNS) - normalized.keys())
        if missing:
            raise ValidationError(f"CSV missing required columns: {', '.join(missing)}")
        columns = {field_name: normalized[header] for header, field_name in _COLUMNS.items()}

        summary = ImportSummary()
        batch: list[Measurement] = []
        for row_number, row in enumerate(reader, start=2):
            raw = {name: (row.get(column) or "").strip() for name, column in columns.items()}
            reason = self._check_row(raw)
            if reason is None:
                try:
                    timestamp = parse_date(raw["date"])
                except ValidationError:
                    reason = "invalid date"
            if reason is None:
                try:
                    value = float(raw["value"])
                except ValueError:
                    reason = "invalid numeric value"
                else:
                    if not math.isfinite(value):
                        reason = "invalid numeric value"

            if reason is not None:
                logger.warning(
                    "Skipping row %s: %s",
                    row_number,
                    reason,
                    extra={"source": source, "row_number": row_number, "reason": reason},
                )
                summary.errors.append(RowError(row_number=row_number, reason=reason))
                continue

            batch.append(
                Measurement(
                    network_code=raw["network_code"],
                    gateway_code=raw["gateway_code"],
                    sensor_code=raw["sensor_code"],
                    value=value,
                    timestamp=timestamp,  # type: ignore[arg-type]
                )
            )

        summary.imported = self.table.append(batch)
        logger.info(
            "Imported measurements",
            extra={
                "source": source,
                "imported": summary.imported,
                "error_count": len(summary.errors),
            },
        )
        return summary

    @staticmethod
    def _check_row(raw: dict[str, str]) -> str | None:
        for name in ("date", "network_code", "gateway_code", "sensor_code", "value"):
            if not raw[name]:
                return f"missing {name}"
        return None


@lru_cache
def build_default_importer() -> MeasurementImporter:
    """Factory that wires the importer to the default measurement table."""
    return MeasurementImporter(build_default_measurement_table())
