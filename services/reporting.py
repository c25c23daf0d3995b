"""Report operations: input validation, existence checks and report assembly."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Any, Optional

from datastore.entities import build_default_entity_tables
from datastore.measurements import build_default_measurement_table
from datastore.ports import EntityStore, MeasurementStore
from models.entities import Gateway, Network, Sensor
from reports.errors import ElementNotFoundError, ValidationError
from reports.gateway import GatewayReport
from reports.histogram import DEFAULT_BUCKET_COUNT, DEFAULT_HOURLY_LIMIT
from reports.network import NetworkReport
from reports.sensor import SensorReport
from reports.statistics import DEFAULT_OUTLIER_SIGMA
from reports.window import ReportWindow
from services.aggregator import Aggregator
from settings import get_settings

logger = logging.getLogger(__name__)


class ReportService:
    """Builds network, gateway and sensor reports from the injected stores.

    Every request is validated and the owning entity looked up before the
    measurement store is read, so a bad code or date never costs a bulk read.
    """

    def __init__(
        self,
        networks: EntityStore[Network],
        gateways: EntityStore[Gateway],
        sensors: EntityStore[Sensor],
        measurements: MeasurementStore,
        aggregator: Optional[Aggregator] = None,
        outlier_sigma: float = DEFAULT_OUTLIER_SIGMA,
        bucket_count: int = DEFAULT_BUCKET_COUNT,
        hourly_limit: timedelta = DEFAULT_HOURLY_LIMIT,
    ) -> None:
        self.networks = networks
        self.gateways = gateways
        self.sensors = sensors
        self.measurements = measurements
        self.aggregator = aggregator or Aggregator()
        self.outlier_sigma = outlier_sigma
        self.bucket_count = bucket_count
        self.hourly_limit = hourly_limit

    def get_network_report(
        self,
        code: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> NetworkReport:
        window = self._prepare("network", self.networks, code, start_date, end_date)
        report = NetworkReport.build(
            code,
            window,
            self.measurements.read_all(),
            aggregator=self.aggregator,
            hourly_limit=self.hourly_limit,
        )
        self._log_built("network", report)
        return report

    def get_gateway_report(
        self,
        code: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> GatewayReport:
        window = self._prepare("gateway", self.gateways, code, start_date, end_date)
        gateway = self.gateways.get_item(code)
        report = GatewayReport.build(
            code,
            window,
            self.measurements.read_all(),
            gateway=gateway,
            aggregator=self.aggregator,
            bucket_count=self.bucket_count,
            sigma=self.outlier_sigma,
        )
        self._log_built("gateway", report, outlier_count=len(report.outlier_sensors))
        return report

    def get_sensor_report(
        self,
        code: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> SensorReport:
        window = self._prepare("sensor", self.sensors, code, start_date, end_date)
        measurements = self.measurements.read_by_sensor_and_range(
            code, window.start, window.end
        )
        report = SensorReport.build(
            code,
            window,
            measurements,
            bucket_count=self.bucket_count,
            sigma=self.outlier_sigma,
        )
        self._log_built("sensor", report, outlier_count=len(report.outliers))
        return report

    def _prepare(
        self,
        entity: str,
        store: EntityStore[Any],
        code: str,
        start_date: Optional[str],
        end_date: Optional[str],
    ) -> ReportWindow:
        if not code or not code.strip():
            raise ValidationError(f"A {entity} code is required.")
        window = ReportWindow.parse(start_date, end_date)
        if not store.exists(code):
            logger.warning(
                "Report requested for unknown %s",
                entity,
                extra={"entity": entity, "code": code},
            )
            raise ElementNotFoundError(entity, code)
        return window

    @staticmethod
    def _log_built(entity: str, report: Any, outlier_count: Optional[int] = None) -> None:
        logger.info(
            "Built %s report",
            entity,
            extra={
                "entity": entity,
                "code": report.code,
                "start_date": report.start_date,
                "end_date": report.end_date,
                "measurement_count": report.number_of_measurements,
                "bucket_count": len(report.histogram),
                "outlier_count": outlier_count,
            },
        )


@lru_cache
def build_default_report_service() -> ReportService:
    """Factory that wires the report operations with the default stores."""
    settings = get_settings()
    tables = build_default_entity_tables()
    return ReportService(
        networks=tables.networks,
        gateways=tables.gateways,
        sensors=tables.sensors,
        measurements=build_default_measurement_table(),
        outlier_sigma=settings.outlier_sigma,
        bucket_count=settings.histogram_buckets,
        hourly_limit=settings.hourly_limit,
    )
