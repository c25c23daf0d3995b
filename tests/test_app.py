from datetime import datetime, timedelta
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.entities import build_entity_tables
from datastore.measurements import MeasurementTable
from models.entities import Gateway, Network, Sensor
from models.records import Measurement
from services.importer import MeasurementImporter
from services.reporting import ReportService

T0 = datetime(2024, 1, 1, 10, 0, 0)


def _cached(factory):
    instance = {}

    def build():
        if "value" not in instance:
            instance["value"] = factory()
        return instance["value"]

    build.cache_clear = instance.clear  # type: ignore[attr-defined]
    return build


@pytest.fixture
def api_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    measurements = MeasurementTable("test", persistence_path=tmp_path / "measurements.json")
    measurements.append(
        [
            Measurement("NET_01", "GW_0001", "S_000001", 1.0, T0),
            Measurement("NET_01", "GW_0001", "S_000001", 2.0, T0 + timedelta(minutes=10)),
            Measurement("NET_01", "GW_0002", "S_000002", 3.0, T0 + timedelta(minutes=20)),
        ]
    )
    tables = build_entity_tables(tmp_path / "entities")
    tables.networks.put_item(Network(code="NET_01", name="Alps"))
    tables.gateways.put_item(Gateway(code="GW_0001", network_code="NET_01"))
    tables.sensors.put_item(Sensor(code="S_000001", gateway_code="GW_0001"))

    build_service = _cached(
        lambda: ReportService(
            networks=tables.networks,
            gateways=tables.gateways,
            sensors=tables.sensors,
            measurements=measurements,
        )
    )
    build_importer = _cached(lambda: MeasurementImporter(measurements))

    monkeypatch.setattr("app.main.build_default_report_service", build_service)
    monkeypatch.setattr("app.main.build_default_importer", build_importer)
    monkeypatch.setattr("app.api.build_default_report_service", build_service)
    monkeypatch.setattr("app.api.build_default_importer", build_importer)

    app = create_app()
    with TestClient(app) as client:
        yield client


def test_network_report_endpoint(api_client: TestClient) -> None:
    response = api_client.get(
        "/networks/NET_01/report",
        params={"start_date": "2024-01-01 10:00:00", "end_date": "2024-01-01 12:00:00"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["code"] == "NET_01"
    assert payload["start_date"] == "2024-01-01 10:00:00"
    assert payload["number_of_measurements"] == 3
    assert payload["most_active_gateways"] == ["GW_0001"]
    assert payload["least_active_gateways"] == ["GW_0002"]
    assert payload["gateways_load_ratio"]["GW_0001"] == pytest.approx(2 / 3)
    assert [bucket["count"] for bucket in payload["histogram"]] == [3, 0]
    assert [bucket["closed"] for bucket in payload["histogram"]] == [False, True]
    assert payload["histogram"][0]["start"] == "2024-01-01T10:00:00"


def test_sensor_report_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/sensors/S_000001/report")

    assert response.status_code == 200
    payload = response.json()
    assert payload["number_of_measurements"] == 2
    assert payload["mean"] == pytest.approx(1.5)
    assert payload["variance"] == pytest.approx(0.5)
    assert payload["minimum_measured_value"] == 1.0
    assert payload["maximum_measured_value"] == 2.0
    assert payload["outliers"] == []
    assert sum(bucket["count"] for bucket in payload["histogram"]) == 2


def test_gateway_report_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/gateways/GW_0001/report")

    assert response.status_code == 200
    payload = response.json()
    assert payload["number_of_measurements"] == 2
    assert payload["sensors_load_ratio"] == {"S_000001": 1.0}
    assert payload["outlier_sensors"] == []
    assert payload["battery_charge_percentage"] is None
    assert len(payload["histogram"]) == 1
    assert payload["histogram"][0]["count"] == 1


def test_unknown_entity_returns_not_found(api_client: TestClient) -> None:
    response = api_client.get("/gateways/GW_9999/report")

    assert response.status_code == 404
    assert "GW_9999" in response.json()["detail"]


def test_malformed_date_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.get(
        "/networks/NET_01/report", params={"start_date": "2024-01-01T10:00:00"}
    )

    assert response.status_code == 400
    assert "start_date" in response.json()["detail"]


def test_reversed_window_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.get(
        "/sensors/S_000001/report",
        params={"start_date": "2024-01-02 00:00:00", "end_date": "2024-01-01 00:00:00"},
    )

    assert response.status_code == 400


def test_import_measurements_then_report(api_client: TestClient) -> None:
    csv_content = """date,networkCode,gatewayCode,sensorCode,value
2024-01-01 11:00:00,NET_01,GW_0001,S_000001,4.0
2024-01-01 11:10:00,NET_01,GW_0001,S_000001,oops
"""

    response = api_client.post(
        "/measurements",
        files={"file": ("readings.csv", csv_content, "text/csv")},
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["imported"] == 1
    assert payload["errors"] == [{"row_number": 3, "reason": "invalid numeric value"}]

    report = api_client.get("/sensors/S_000001/report").json()
    assert report["number_of_measurements"] == 3


def test_import_empty_file_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/measurements",
        files={"file": ("empty.csv", b"", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Uploaded file is empty."


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
