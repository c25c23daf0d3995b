from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from reports.histogram import DEFAULT_BUCKET_COUNT, DEFAULT_HOURLY_LIMIT
from reports.statistics import DEFAULT_OUTLIER_SIGMA


_ENTITY_ROOT_ENV = "ENTITY_STORE_ROOT"
_MEASUREMENT_PATH_ENV = "MEASUREMENT_STORE_PATH"
_OUTLIER_SIGMA_ENV = "REPORT_OUTLIER_SIGMA"
_BUCKET_COUNT_ENV = "REPORT_HISTOGRAM_BUCKETS"
_HOURLY_LIMIT_ENV = "REPORT_HOURLY_LIMIT_HOURS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    entity_store_root: Optional[str]
    measurement_store_path: Optional[str]
    outlier_sigma: float
    histogram_buckets: int
    hourly_limit: timedelta
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    default_hours = int(DEFAULT_HOURLY_LIMIT / timedelta(hours=1))
    return Settings(
        entity_store_root=_read_optional_env(_ENTITY_ROOT_ENV, "./tmp/entities"),
        measurement_store_path=_read_optional_env(
            _MEASUREMENT_PATH_ENV, "./tmp/measurements.json"
        ),
        outlier_sigma=_read_positive_float(_OUTLIER_SIGMA_ENV, DEFAULT_OUTLIER_SIGMA),
        histogram_buckets=_read_positive_int(_BUCKET_COUNT_ENV, DEFAULT_BUCKET_COUNT),
        hourly_limit=timedelta(hours=_read_positive_int(_HOURLY_LIMIT_ENV, default_hours)),
        log_level=_read_log_level("INFO"),
    )
