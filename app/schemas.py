"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from models.records import Measurement
from reports.gateway import GatewayReport
from reports.histogram import Histogram
from reports.network import NetworkReport
from reports.sensor import SensorReport
from services.importer import ImportSummary

T = TypeVar("T")


class Bucket(BaseModel, Generic[T]):
    """One histogram bucket; ``closed`` marks the inclusive last bucket."""

    start: T
    end: T
    closed: bool = False
    count: int = Field(..., ge=0)


def _buckets(histogram: Histogram) -> list[dict]:
    return [
        {"start": bucket.start, "end": bucket.end, "closed": bucket.last, "count": count}
        for bucket, count in histogram.items()
    ]


class MeasurementSchema(BaseModel):
    network_code: str
    gateway_code: str
    sensor_code: str
    value: float
    timestamp: datetime

    @classmethod
    def from_record(cls, measurement: Measurement) -> "MeasurementSchema":
        return cls(
            network_code=measurement.network_code,
            gateway_code=measurement.gateway_code,
            sensor_code=measurement.sensor_code,
            value=measurement.value,
            timestamp=measurement.timestamp,
        )


class ReportResponse(BaseModel):
    """Fields every report exposes."""

    code: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    number_of_measurements: int = Field(..., ge=0)


class NetworkReportResponse(ReportResponse):
    most_active_gateways: List[str] = Field(default_factory=list)
    least_active_gateways: List[str] = Field(default_factory=list)
    gateways_load_ratio: Dict[str, float] = Field(default_factory=dict)
    histogram: List[Bucket[datetime]] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: NetworkReport) -> "NetworkReportResponse":
        return cls(
            code=report.code,
            start_date=report.start_date,
            end_date=report.end_date,
            number_of_measurements=report.number_of_measurements,
            most_active_gateways=list(report.most_active_gateways),
            least_active_gateways=list(report.least_active_gateways),
            gateways_load_ratio=dict(report.gateways_load_ratio),
            histogram=_buckets(report.histogram),
        )


class GatewayReportResponse(ReportResponse):
    most_active_sensors: List[str] = Field(default_factory=list)
    least_active_sensors: List[str] = Field(default_factory=list)
    sensors_load_ratio: Dict[str, float] = Field(default_factory=dict)
    outlier_sensors: List[str] = Field(default_factory=list)
    battery_charge_percentage: Optional[float] = None
    histogram: List[Bucket[timedelta]] = Field(
        default_factory=list,
        description="Inter-arrival time buckets, durations in ISO 8601 form.",
    )

    @classmethod
    def from_report(cls, report: GatewayReport) -> "GatewayReportResponse":
        return cls(
            code=report.code,
            start_date=report.start_date,
            end_date=report.end_date,
            number_of_measurements=report.number_of_measurements,
            most_active_sensors=list(report.most_active_sensors),
            least_active_sensors=list(report.least_active_sensors),
            sensors_load_ratio=dict(report.sensors_load_ratio),
            outlier_sensors=list(report.outlier_sensors),
            battery_charge_percentage=report.battery_charge_percentage,
            histogram=_buckets(report.histogram),
        )


class SensorReportResponse(ReportResponse):
    mean: float = 0.0
    variance: float = 0.0
    stddev: float = 0.0
    minimum_measured_value: Optional[float] = None
    maximum_measured_value: Optional[float] = None
    outliers: List[MeasurementSchema] = Field(default_factory=list)
    histogram: List[Bucket[float]] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: SensorReport) -> "SensorReportResponse":
        return cls(
            code=report.code,
            start_date=report.start_date,
            end_date=report.end_date,
            number_of_measurements=report.number_of_measurements,
            mean=report.mean,
            variance=report.variance,
            stddev=report.stddev,
            minimum_measured_value=report.minimum_measured_value,
            maximum_measured_value=report.maximum_measured_value,
            outliers=[MeasurementSchema.from_record(item) for item in report.outliers],
            histogram=_buckets(report.histogram),
        )


class RowErrorSchema(BaseModel):
    """Details about a CSV row that failed validation or parsing."""

    row_number: int = Field(..., ge=1)
    reason: str


class ImportResponse(BaseModel):
    imported: int = Field(..., ge=0)
    errors: List[RowErrorSchema] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "ImportResponse":
        return cls(
            imported=summary.imported,
            errors=[
                RowErrorSchema(row_number=error.row_number, reason=error.reason)
                for error in summary.errors
            ],
        )
