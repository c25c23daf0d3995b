from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from datastore.entities import build_default_entity_tables
from datastore.measurements import build_default_measurement_table
from services.reporting import build_default_report_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    entity_root = tmp_path / "entities"
    measurement_path = tmp_path / "measurements.json"

    monkeypatch.setenv("ENTITY_STORE_ROOT", str(entity_root))
    monkeypatch.setenv("MEASUREMENT_STORE_PATH", str(measurement_path))
    monkeypatch.setenv("REPORT_OUTLIER_SIGMA", "3")
    monkeypatch.setenv("REPORT_HISTOGRAM_BUCKETS", "10")
    monkeypatch.setenv("REPORT_HOURLY_LIMIT_HOURS", "24")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (
        get_settings,
        build_default_entity_tables,
        build_default_measurement_table,
        build_default_report_service,
    )
    _clear_caches(caches)

    try:
        settings = get_settings()
        service = build_default_report_service()

        assert settings.log_level == "DEBUG"
        assert service.outlier_sigma == 3.0
        assert service.bucket_count == 10
        assert service.hourly_limit == timedelta(hours=24)
        assert service.networks.persistence_path == entity_root / "networks.json"
        assert service.measurements.persistence_path == measurement_path
    finally:
        _clear_caches(caches)


def test_invalid_overrides_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("REPORT_OUTLIER_SIGMA", "-1")
    monkeypatch.setenv("REPORT_HISTOGRAM_BUCKETS", "many")
    monkeypatch.setenv("REPORT_HOURLY_LIMIT_HOURS", "")
    get_settings.cache_clear()

    try:
        settings = get_settings()

        assert settings.outlier_sigma == 2.0
        assert settings.histogram_buckets == 20
        assert settings.hourly_limit == timedelta(hours=48)
    finally:
        get_settings.cache_clear()
