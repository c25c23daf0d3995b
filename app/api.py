"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from app.schemas import (
    GatewayReportResponse,
    ImportResponse,
    NetworkReportResponse,
    SensorReportResponse,
)
from reports.errors import ElementNotFoundError, ReportError, ValidationError
from services.importer import MeasurementImporter, build_default_importer
from services.reporting import ReportService, build_default_report_service

router = APIRouter()

_START_DATE = Query(None, description="Inclusive lower bound, yyyy-MM-dd HH:mm:ss.")
_END_DATE = Query(None, description="Inclusive upper bound, yyyy-MM-dd HH:mm:ss.")


def get_report_service() -> ReportService:
    return build_default_report_service()


def get_importer() -> MeasurementImporter:
    return build_default_importer()


def _raise_http(exc: ReportError) -> NoReturn:
    if isinstance(exc, ElementNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    raise exc


@router.get(
    "/networks/{code}/report",
    response_model=NetworkReportResponse,
    summary="Gateway activity and hourly or daily measurement histogram for a network.",
)
async def network_report(
    code: str,
    start_date: Optional[str] = _START_DATE,
    end_date: Optional[str] = _END_DATE,
    service: ReportService = Depends(get_report_service),
) -> NetworkReportResponse:
    try:
        report = service.get_network_report(code, start_date, end_date)
    except ReportError as exc:
        _raise_http(exc)
    return NetworkReportResponse.from_report(report)


@router.get(
    "/gateways/{code}/report",
    response_model=GatewayReportResponse,
    summary="Sensor activity, outliers and inter-arrival histogram for a gateway.",
)
async def gateway_report(
    code: str,
    start_date: Optional[str] = _START_DATE,
    end_date: Optional[str] = _END_DATE,
    service: ReportService = Depends(get_report_service),
) -> GatewayReportResponse:
    try:
        report = service.get_gateway_report(code, start_date, end_date)
    except ReportError as exc:
        _raise_http(exc)
    return GatewayReportResponse.from_report(report)


@router.get(
    "/sensors/{code}/report",
    response_model=SensorReportResponse,
    summary="Statistics, outliers and value histogram for a sensor.",
)
async def sensor_report(
    code: str,
    start_date: Optional[str] = _START_DATE,
    end_date: Optional[str] = _END_DATE,
    service: ReportService = Depends(get_report_service),
) -> SensorReportResponse:
    try:
        report = service.get_sensor_report(code, start_date, end_date)
    except ReportError as exc:
        _raise_http(exc)
    return SensorReportResponse.from_report(report)


@router.post(
    "/measurements",
    status_code=status.HTTP_201_CREATED,
    response_model=ImportResponse,
    summary="Import measurements from a CSV file.",
)
async def import_measurements(
    file: UploadFile = File(..., description="CSV file containing measurements."),
    importer: MeasurementImporter = Depends(get_importer),
) -> ImportResponse:
    contents = await file.read()
    try:
        summary = importer.import_bytes(contents, source=file.filename or "upload.csv")
    except ReportError as exc:
        _raise_http(exc)
    finally:
        await file.close()
    return ImportResponse.from_summary(summary)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
